from __future__ import annotations

import logging
from dataclasses import dataclass

from storyfeed.core.database import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

# "stories": static per-date / per-profile JSON lists; "api": cursor-paginated API
FEED_BACKENDS = ("stories", "api")


@dataclass(frozen=True)
class FeedSettings:
    """Typed view over the config table."""

    api_base_url: str = DEFAULT_CONFIG['api_base_url']
    stories_json_url: str = DEFAULT_CONFIG['stories_json_url']
    media_base_url: str = DEFAULT_CONFIG['media_base_url']
    feed_backend: str = DEFAULT_CONFIG['feed_backend']
    page_size: int = 30
    first_page_size: int = 30
    fetch_timeout_seconds: float = 30.0
    profiles_cache_ttl_seconds: int = 300
    scroll_margin_px: int = 20
    thumbnail_width: int = 200

    @classmethod
    def from_db(cls, db) -> "FeedSettings":
        """
        Read settings from a DatabaseManager.

        Unparseable or non-positive numbers fall back to the defaults.
        """
        defaults = cls()

        backend = str(db.get_config('feed_backend', defaults.feed_backend)).strip().lower()
        if backend not in FEED_BACKENDS:
            logger.warning(f"Unknown feed_backend {backend!r}, using {defaults.feed_backend!r}")
            backend = defaults.feed_backend

        def _number(key: str, default, cast=int):
            raw = db.get_config(key, str(default))
            try:
                value = cast(raw)
            except (TypeError, ValueError):
                logger.warning(f"Invalid value for config '{key}': {raw!r}, using {default}")
                return default
            if value <= 0:
                logger.warning(f"Non-positive value for config '{key}': {raw!r}, using {default}")
                return default
            return value

        return cls(
            api_base_url=db.get_config('api_base_url', defaults.api_base_url),
            stories_json_url=db.get_config('stories_json_url', defaults.stories_json_url),
            media_base_url=db.get_config('media_base_url', defaults.media_base_url),
            feed_backend=backend,
            page_size=_number('page_size', defaults.page_size),
            first_page_size=_number('first_page_size', defaults.first_page_size),
            fetch_timeout_seconds=_number('fetch_timeout_seconds', defaults.fetch_timeout_seconds, float),
            profiles_cache_ttl_seconds=_number('profiles_cache_ttl_seconds', defaults.profiles_cache_ttl_seconds),
            scroll_margin_px=_number('scroll_margin_px', defaults.scroll_margin_px),
            thumbnail_width=_number('thumbnail_width', defaults.thumbnail_width),
        )
