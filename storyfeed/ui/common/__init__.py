from .view_models import (
    GalleryViewModel,
    MediaTile,
    ThumbnailZoom,
    build_tiles,
    format_caption,
    format_timestamp_label,
    resolve_media_url,
    resolve_poster_url,
)

__all__ = [
    "GalleryViewModel",
    "MediaTile",
    "ThumbnailZoom",
    "build_tiles",
    "format_caption",
    "format_timestamp_label",
    "resolve_media_url",
    "resolve_poster_url",
]
