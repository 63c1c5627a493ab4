from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple, Union

from storyfeed.core.dto.media import MediaItem


# Opaque server token or numeric offset into a cached list.
Cursor = Union[str, int]


def format_date_key(day: date) -> str:
    """Format a calendar date the way the stories backend keys it (DD.MM.YY)."""
    return f"{day.day:02d}.{day.month:02d}.{day.year % 100:02d}"


@dataclass(frozen=True)
class ByDate:
    date: date

    @property
    def key(self) -> str:
        return format_date_key(self.date)

    def describe(self) -> str:
        return f"date {self.key}"


@dataclass(frozen=True)
class ByProfile:
    profile_id: str

    @property
    def key(self) -> str:
        return self.profile_id

    def describe(self) -> str:
        return f"profile {self.profile_id}"


FeedQuery = Union[ByDate, ByProfile]


@dataclass(frozen=True)
class Page:
    items: Tuple[MediaItem, ...] = field(default_factory=tuple)
    cursor: Optional[Cursor] = None

    @property
    def is_last(self) -> bool:
        return self.cursor is None
