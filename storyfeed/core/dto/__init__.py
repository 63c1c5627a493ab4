from storyfeed.core.dto.media import MediaItem, MediaKind, is_video_path, kind_for_path
from storyfeed.core.dto.feed import ByDate, ByProfile, Cursor, FeedQuery, Page, format_date_key
from storyfeed.core.dto.profile import ProfileDTO

__all__ = [
    # Media
    "MediaItem",
    "MediaKind",
    "is_video_path",
    "kind_for_path",

    # Feed
    "ByDate",
    "ByProfile",
    "Cursor",
    "FeedQuery",
    "Page",
    "format_date_key",

    # Profiles
    "ProfileDTO",
]
