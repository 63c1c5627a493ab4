"""Incremental paginated feed engine for date- and profile-based media galleries."""

from storyfeed.core.api.base import FetchError, ParseError
from storyfeed.core.coordinator import FeedEvent, RequestCoordinator
from storyfeed.core.dto import ByDate, ByProfile, MediaItem, Page, ProfileDTO
from storyfeed.core.feed_state import LoadOutcome, PaginationState, WindowStore
from storyfeed.core.filters import FilterState, visible_window
from storyfeed.core.gallery_feed import GalleryFeed
from storyfeed.core.scroll_trigger import ScrollTrigger, is_near_boundary

__version__ = "1.0.0"

__all__ = [
    "ByDate",
    "ByProfile",
    "FeedEvent",
    "FetchError",
    "FilterState",
    "GalleryFeed",
    "LoadOutcome",
    "MediaItem",
    "Page",
    "PaginationState",
    "ParseError",
    "ProfileDTO",
    "RequestCoordinator",
    "ScrollTrigger",
    "WindowStore",
    "is_near_boundary",
    "visible_window",
]
