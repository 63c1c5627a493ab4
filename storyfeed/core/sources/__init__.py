from storyfeed.core.sources.base import FeedSource
from storyfeed.core.sources.cursor_api import CursorApiSource
from storyfeed.core.sources.flat_list import (
    DateBucketSource,
    FlatListSource,
    ProfileListSource,
    owner_from_path,
)

__all__ = [
    "FeedSource",
    "CursorApiSource",
    "FlatListSource",
    "ProfileListSource",
    "DateBucketSource",
    "owner_from_path",
]
