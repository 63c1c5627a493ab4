import pytest

from storyfeed.core.dto.media import MediaItem
from storyfeed.core.filters import FilterState
from storyfeed.ui.common.view_models import (
    DEFAULT_THUMBNAIL_WIDTH,
    MAX_THUMBNAIL_WIDTH,
    MIN_THUMBNAIL_WIDTH,
    ThumbnailZoom,
    build_tiles,
    format_caption,
    format_iso_time,
    format_timestamp_label,
    resolve_media_url,
)

BASE = "https://bucket.example.test/"


@pytest.mark.parametrize("filename, expected", [
    ("stories/acme/2024-03-05 at 10.15.30 PM.jpg", "05/03 - 10:15"),
    ("2023-12-31 at 01.02.03 AM.mp4", "31/12 - 01:02"),
    ("stories/acme/random.jpg", ""),
    ("", ""),
])
def test_format_timestamp_label(filename, expected):
    assert format_timestamp_label(filename) == expected


def test_format_iso_time():
    assert format_iso_time("2024-03-05T10:15:30Z") == "10:15:30"
    assert format_iso_time("yesterday") == ""


def test_caption_prefers_selected_profile():
    item = MediaItem.from_path("stories/acme/2024-03-05 at 10.15.30 PM.jpg", owner_label="acme")

    assert format_caption(item) == "@acme\n05/03 - 10:15"
    assert format_caption(item, "someone") == "someone\n05/03 - 10:15"


def test_caption_is_blank_without_timestamp():
    item = MediaItem.from_path("stories/acme/random.jpg", owner_label="acme")
    assert format_caption(item) == ""


def test_caption_for_api_item():
    item = MediaItem(id="1", url="x.jpg", kind="photo",
                     timestamp_or_filename="2024-03-05T10:15:30Z", owner_label="acme")
    assert format_caption(item) == "@acme\n10:15:30"


def test_resolve_media_url():
    assert resolve_media_url(BASE, "stories/a.jpg") == BASE + "stories/a.jpg"
    assert resolve_media_url(BASE, "https://cdn/a.jpg") == "https://cdn/a.jpg"


def test_build_tiles_filters_and_posters():
    photo = MediaItem.from_path("stories/acme/a.jpg", owner_label="acme")
    video = MediaItem.from_path("stories/acme/b.mp4", owner_label="acme")

    tiles = build_tiles([photo, video], FilterState(), BASE)
    assert [t.src for t in tiles] == [BASE + "stories/acme/a.jpg", BASE + "stories/acme/b.mp4"]
    assert tiles[0].poster is None
    assert tiles[1].poster == BASE + "thumbnails/stories/acme/b.mp4.jpg"
    assert tiles[1].is_video

    only_videos = build_tiles([photo, video], FilterState(show_photos=False), BASE)
    assert [t.item for t in only_videos] == [video]


def test_zoom_is_clamped():
    zoom = ThumbnailZoom()
    assert zoom.width == DEFAULT_THUMBNAIL_WIDTH
    assert zoom.zoom_in().width == DEFAULT_THUMBNAIL_WIDTH + 20

    for _ in range(20):
        zoom = zoom.zoom_in()
    assert zoom.width == MAX_THUMBNAIL_WIDTH

    for _ in range(20):
        zoom = zoom.zoom_out()
    assert zoom.width == MIN_THUMBNAIL_WIDTH


def test_columns_for():
    zoom = ThumbnailZoom(width=200)
    assert zoom.columns_for(1000) == 4
    assert zoom.columns_for(50) == 1
