from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Literal, Optional
from urllib.parse import urlparse


MediaKind = Literal["photo", "video"]

VIDEO_EXTS = {".mp4", ".webm", ".mov", ".m4v", ".mkv", ".avi", ".flv"}


def is_video_path(path: str) -> bool:
    """True when the path (or URL) ends in a known video extension."""
    if not path:
        return False
    try:
        path = urlparse(path).path or path
    except ValueError:
        pass
    return PurePosixPath(path).suffix.lower() in VIDEO_EXTS


def kind_for_path(path: str) -> MediaKind:
    return "video" if is_video_path(path) else "photo"


@dataclass(frozen=True, slots=True)
class MediaItem:
    id: str                     # unique within one feed generation
    url: str                    # storage key or absolute URL
    kind: MediaKind
    timestamp_or_filename: str
    owner_label: str = ""

    @property
    def is_video(self) -> bool:
        return self.kind == "video"

    @property
    def is_photo(self) -> bool:
        return self.kind == "photo"

    @classmethod
    def from_path(cls, path: str, *, owner_label: str = "", item_id: Optional[str] = None) -> "MediaItem":
        """Build an item from a flat-list file path; the path doubles as id."""
        return cls(
            id=item_id or path,
            url=path,
            kind=kind_for_path(path),
            timestamp_or_filename=path,
            owner_label=owner_label,
        )
