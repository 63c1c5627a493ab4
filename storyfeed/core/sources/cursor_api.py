from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from storyfeed.core.api.base import ParseError
from storyfeed.core.dto.feed import ByDate, ByProfile, Cursor, FeedQuery, Page
from storyfeed.core.dto.media import MediaItem, kind_for_path

from .base import FeedSource

logger = logging.getLogger(__name__)


class CursorApiSource(FeedSource):
    """
    Server-side cursor pagination.

    ByDate    -> GET /api/media?date=<DD.MM.YY>&cursor=<token>&limit=<n>
    ByProfile -> GET /api/profile-media?instagramId=<id>&cursor=<token>&limit=<n>

    Response: {"items": [{id, url, type, timestamp, profileName}], "nextCursor": str|null}
    Items are kept in server order.
    """

    NAME = "cursor-api"

    def supports(self, query: FeedQuery) -> bool:
        return isinstance(query, (ByDate, ByProfile))

    async def fetch_page(self, query: FeedQuery, cursor: Optional[Cursor], page_size: int) -> Page:
        self._check_page_size(page_size)
        if cursor is not None and not isinstance(cursor, str):
            raise ValueError(f"{self.NAME} expects an opaque string cursor, got {cursor!r}")

        if isinstance(query, ByDate):
            path = "/api/media"
            params: Dict[str, Any] = {"date": query.key}
        elif isinstance(query, ByProfile):
            path = "/api/profile-media"
            params = {"instagramId": query.profile_id}
        else:
            raise ValueError(f"{self.NAME} cannot serve {query!r}")
        params["cursor"] = cursor or ""
        params["limit"] = page_size

        data = await self._fetch_json(f"{self.base_url}{path}", params=params)
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            raise ParseError(f"{self.NAME} response for {query.describe()} has no 'items' list")

        items = tuple(self.item_from_raw(raw) for raw in data["items"])

        next_cursor = data.get("nextCursor")
        if next_cursor is not None and not isinstance(next_cursor, str):
            raise ParseError(f"{self.NAME} nextCursor must be a string or null, got {next_cursor!r}")
        next_cursor = next_cursor or None
        if next_cursor is not None and next_cursor == cursor:
            logger.warning(f"{self.NAME}: server repeated cursor {cursor!r}; treating feed as exhausted")
            next_cursor = None

        return Page(items=items, cursor=next_cursor)

    @staticmethod
    def item_from_raw(raw: Any) -> MediaItem:
        if not isinstance(raw, dict):
            raise ParseError(f"media item is not an object: {raw!r}")
        url = raw.get("url")
        if not isinstance(url, str) or not url:
            raise ParseError(f"media item without url: {raw!r}")

        declared = raw.get("type")
        kind = declared if declared in ("photo", "video") else kind_for_path(url)

        return MediaItem(
            id=str(raw.get("id") or url),
            url=url,
            kind=kind,
            timestamp_or_filename=str(raw.get("timestamp") or ""),
            owner_label=str(raw.get("profileName") or ""),
        )
