from __future__ import annotations

import logging
from typing import List, Optional

from storyfeed.core.api import ProfilesClient
from storyfeed.core.coordinator import RequestCoordinator
from storyfeed.core.database import DatabaseManager
from storyfeed.core.gallery_feed import GalleryFeed
from storyfeed.core.http_client import HttpClient, create_http_client_from_settings
from storyfeed.core.profiles_manager import ProfilesManager
from storyfeed.core.settings import FeedSettings
from storyfeed.core.sources import CursorApiSource, DateBucketSource, FeedSource, ProfileListSource

logger = logging.getLogger(__name__)


def build_sources(settings: FeedSettings, http_client: HttpClient) -> List[FeedSource]:
    """Feed sources for the configured backend, in lookup order."""
    if settings.feed_backend == "api":
        return [CursorApiSource(http_client, base_url=settings.api_base_url)]
    return [
        DateBucketSource(http_client, base_url=settings.stories_json_url),
        ProfileListSource(http_client, base_url=settings.stories_json_url),
    ]


class FeedContext:
    """
    Shared dependencies (settings DB + HTTP sessions + managers).

    Use a single instance per gallery window.
    """

    def __init__(
        self,
        *,
        db: Optional[DatabaseManager] = None,
        http_client: Optional[HttpClient] = None,
        settings: Optional[FeedSettings] = None,
    ):
        self.db = db or DatabaseManager()
        if self.db.conn is None:
            self.db.connect()

        self.settings = settings or FeedSettings.from_db(self.db)
        self.http = http_client or create_http_client_from_settings(self.db)
        logger.info(
            f"Feed context created - backend: {self.settings.feed_backend}, "
            f"page_size: {self.settings.page_size}, first_page_size: {self.settings.first_page_size}"
        )

        self.profiles = ProfilesManager(
            ProfilesClient(
                self.http.get_sync_session(),
                base_url=self.settings.api_base_url,
                timeout=self.settings.fetch_timeout_seconds,
                cache_ttl_seconds=self.settings.profiles_cache_ttl_seconds,
                http_config=self.http.config,
            )
        )

        self.sources = build_sources(self.settings, self.http)
        self.coordinator = RequestCoordinator(
            self.sources,
            page_size=self.settings.page_size,
            first_page_size=self.settings.first_page_size,
            fetch_timeout=self.settings.fetch_timeout_seconds,
        )
        self.gallery = GalleryFeed(self.coordinator)

    async def aclose(self) -> None:
        await self.http.close_async_session()

    def close(self) -> None:
        self.http.close()
        self.db.close()
