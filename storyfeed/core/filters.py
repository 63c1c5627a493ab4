from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Tuple

from storyfeed.core.dto.media import MediaItem


@dataclass(frozen=True)
class FilterState:
    """Media-type toggles. A pure view predicate; never touches pagination."""
    show_photos: bool = True
    show_videos: bool = True

    def toggle_photos(self) -> "FilterState":
        return replace(self, show_photos=not self.show_photos)

    def toggle_videos(self) -> "FilterState":
        return replace(self, show_videos=not self.show_videos)

    def accepts(self, item: MediaItem) -> bool:
        if item.is_video:
            return self.show_videos
        return self.show_photos


def visible_window(items: Iterable[MediaItem], filters: FilterState) -> Tuple[MediaItem, ...]:
    """Loaded items passing the filters, in load order."""
    return tuple(item for item in items if filters.accepts(item))
