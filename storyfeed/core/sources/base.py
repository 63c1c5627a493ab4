"""
Feed source contract.

Every backend shape (cursor API, flat file list, per-date bucket) is reduced
to one coroutine: fetch_page(query, cursor, page_size) -> Page.

Contract goals:
- Adapters never touch pagination state; they only answer one page
- Cursor types are never mixed within one adapter
- Failures surface as FetchError / ParseError, nothing else
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp

from storyfeed.core.api.base import FetchError, ParseError
from storyfeed.core.dto.feed import Cursor, FeedQuery, Page
from storyfeed.core.http_client import HttpClient

logger = logging.getLogger(__name__)


class FeedSource(ABC):
    """Async adapter turning one backend shape into Pages."""

    NAME: str = "source"

    def __init__(self, http_client: Optional[HttpClient] = None, *, base_url: str = ""):
        self._http = http_client or HttpClient()
        self.base_url = base_url.rstrip("/")

    @abstractmethod
    def supports(self, query: FeedQuery) -> bool:
        """True when this adapter can serve the query kind."""

    @abstractmethod
    async def fetch_page(self, query: FeedQuery, cursor: Optional[Cursor], page_size: int) -> Page:
        """Fetch one page; cursor None means the start of the feed."""

    def invalidate(self) -> None:
        """Drop anything cached for earlier queries."""

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    async def _fetch_json(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        session = await self._http.get_async_session()
        await self._http.config.apply_request_delay_async()
        logger.info(f"Feed Request [{self.NAME}]: GET {url}")
        if params:
            logger.debug(f"Request params: {params}")

        try:
            async with session.get(url, params=params) as resp:
                if resp.status < 200 or resp.status >= 300:
                    body = await resp.text()
                    raise FetchError(f"{self.NAME} error {resp.status} for {url}: {body[:200]}")
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise ParseError(f"{self.NAME} returned malformed JSON for {url}: {e}") from e
        except FetchError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"{self.NAME} request failed for {url}: {e}") from e

    @staticmethod
    def _check_page_size(page_size: int) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
