from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, List, Optional

from storyfeed.core.dto.media import MediaItem
from storyfeed.core.filters import FilterState, visible_window
from storyfeed.core.gallery_feed import GalleryFeed
from storyfeed.core.settings import FeedSettings


MIN_THUMBNAIL_WIDTH = 100
MAX_THUMBNAIL_WIDTH = 300
DEFAULT_THUMBNAIL_WIDTH = 200
ZOOM_STEP = 20

# "2024-03-05 at 10.15.30 PM"
_FILENAME_TS_RE = re.compile(r"(\d{4}-\d{2}-\d{2}) at (\d{2}\.\d{2}\.\d{2} [AP]M)")


def format_timestamp_label(filename: str) -> str:
    """
    "... 2024-03-05 at 10.15.30 PM ..." -> "05/03 - 10:15".

    Returns "" for anything that does not carry the pattern.
    """
    match = _FILENAME_TS_RE.search(filename or "")
    if not match:
        return ""
    date_part, time_part = match.groups()
    _, month, day = date_part.split("-")
    hours, minutes, _ = time_part.split(" ")[0].split(".")
    return f"{day}/{month} - {hours}:{minutes}"


def format_iso_time(timestamp: str) -> str:
    """ISO timestamp -> "HH:MM:SS"; "" when unparseable."""
    if not timestamp:
        return ""
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return ""
    return parsed.strftime("%H:%M:%S")


def format_caption(item: MediaItem, selected_profile: Optional[str] = None) -> str:
    """
    Two-line overlay caption: owner, then time.

    File-list items show "DD/MM - HH:MM" and are left blank when the filename
    has no timestamp. API items carry an ISO timestamp instead.
    """
    label = format_timestamp_label(item.timestamp_or_filename)
    if label:
        if selected_profile:
            return f"{selected_profile}\n{label}"
        if item.owner_label:
            return f"@{item.owner_label}\n{label}"
        return ""

    clock = format_iso_time(item.timestamp_or_filename)
    if clock and item.owner_label:
        return f"@{item.owner_label}\n{clock}"
    return ""


def resolve_media_url(base_url: str, key: str) -> str:
    """Storage keys are joined onto the bucket prefix; absolute URLs pass through."""
    if key.startswith(("http://", "https://")):
        return key
    return f"{base_url}{key}"


def resolve_poster_url(base_url: str, key: str) -> Optional[str]:
    """Video posters live under thumbnails/; only storage keys have one."""
    if key.startswith(("http://", "https://")):
        return None
    return f"{base_url}thumbnails/{key}.jpg"


@dataclass(frozen=True)
class ThumbnailZoom:
    width: int = DEFAULT_THUMBNAIL_WIDTH

    @classmethod
    def clamped(cls, width: int) -> "ThumbnailZoom":
        return cls(width=max(MIN_THUMBNAIL_WIDTH, min(MAX_THUMBNAIL_WIDTH, width)))

    def zoom_in(self) -> "ThumbnailZoom":
        return replace(self, width=min(MAX_THUMBNAIL_WIDTH, self.width + ZOOM_STEP))

    def zoom_out(self) -> "ThumbnailZoom":
        return replace(self, width=max(MIN_THUMBNAIL_WIDTH, self.width - ZOOM_STEP))

    def columns_for(self, available_width: int, spacing: int = 16) -> int:
        """Column count for an auto-fill grid of at least `width` px per tile."""
        return max(1, (available_width + spacing) // (self.width + spacing))


@dataclass(frozen=True)
class MediaTile:
    item: MediaItem
    src: str
    caption: str
    poster: Optional[str] = None

    @property
    def is_video(self) -> bool:
        return self.item.is_video


def build_tiles(
    items: Iterable[MediaItem],
    filters: FilterState,
    base_url: str,
    *,
    selected_profile: Optional[str] = None,
) -> List[MediaTile]:
    tiles = []
    for item in visible_window(items, filters):
        tiles.append(
            MediaTile(
                item=item,
                src=resolve_media_url(base_url, item.url),
                caption=format_caption(item, selected_profile),
                poster=resolve_poster_url(base_url, item.url) if item.is_video else None,
            )
        )
    return tiles


class GalleryViewModel:
    """
    Tile and zoom state for one gallery screen.

    The bucket prefix and initial thumbnail width come from FeedSettings;
    tiles are rebuilt from the feed's loaded items on every call.
    """

    def __init__(self, feed: GalleryFeed, settings: FeedSettings):
        self.feed = feed
        self.media_base_url = settings.media_base_url
        self.zoom = ThumbnailZoom.clamped(settings.thumbnail_width)

    def tiles(self) -> List[MediaTile]:
        return build_tiles(
            self.feed.loaded_items,
            self.feed.filters,
            self.media_base_url,
            selected_profile=self.feed.selected_profile,
        )

    def zoom_in(self) -> ThumbnailZoom:
        self.zoom = self.zoom.zoom_in()
        return self.zoom

    def zoom_out(self) -> ThumbnailZoom:
        self.zoom = self.zoom.zoom_out()
        return self.zoom
