"""
Flat file-list sources.

The backend returns the whole list of storage keys at once as
{"files": [...]}. The list is fetched at the start of each generation,
reversed once (most recent first), cached for that query and then sliced
by numeric offset.
"""

from __future__ import annotations

import logging
import re
from abc import abstractmethod
from typing import Dict, Optional, Tuple

from storyfeed.core.api.base import ParseError
from storyfeed.core.dto.feed import ByDate, ByProfile, Cursor, FeedQuery, Page
from storyfeed.core.dto.media import MediaItem

from .base import FeedSource

logger = logging.getLogger(__name__)

# "<root>/<profile>/<file>": the second segment names the owner
_OWNER_RE = re.compile(r"([^/]+)/([^/]+)/")


def owner_from_path(path: str) -> str:
    match = _OWNER_RE.search(path)
    return match.group(2) if match else ""


class FlatListSource(FeedSource):
    """Client-side pagination over a list fetched once per generation."""

    def __init__(self, http_client=None, *, base_url: str = ""):
        super().__init__(http_client, base_url=base_url)
        self._lists: Dict[FeedQuery, Tuple[MediaItem, ...]] = {}
        # Bumped by invalidate(); a listing fetched under an older epoch is not cached.
        self._epoch = 0

    @abstractmethod
    def list_url(self, query: FeedQuery) -> str:
        """URL of the JSON listing for the query."""

    @abstractmethod
    def owner_label(self, query: FeedQuery, path: str) -> str:
        """Owner shown under each item."""

    def invalidate(self) -> None:
        if self._lists:
            logger.debug(f"{self.NAME}: dropping {len(self._lists)} cached list(s)")
        self._lists.clear()
        self._epoch += 1

    async def fetch_page(self, query: FeedQuery, cursor: Optional[Cursor], page_size: int) -> Page:
        if not self.supports(query):
            raise ValueError(f"{self.NAME} cannot serve {query.describe()}")
        self._check_page_size(page_size)
        if cursor is not None and (isinstance(cursor, bool) or not isinstance(cursor, int) or cursor < 0):
            raise ValueError(f"{self.NAME} expects a non-negative integer cursor, got {cursor!r}")

        items = self._lists.get(query)
        if cursor is None or items is None:
            epoch = self._epoch
            items = await self._load_list(query)
            if epoch == self._epoch:
                self._lists[query] = items
            else:
                logger.debug(f"{self.NAME}: not caching listing for {query.describe()} fetched before invalidate()")

        start = cursor or 0
        end = start + page_size
        next_cursor = end if end < len(items) else None
        return Page(items=items[start:end], cursor=next_cursor)

    async def _load_list(self, query: FeedQuery) -> Tuple[MediaItem, ...]:
        data = await self._fetch_json(self.list_url(query))
        if not isinstance(data, dict) or not isinstance(data.get("files"), list):
            raise ParseError(f"{self.NAME} listing for {query.describe()} has no 'files' list")

        files = [f for f in data["files"] if isinstance(f, str) and f]
        skipped = len(data["files"]) - len(files)
        if skipped:
            logger.warning(f"{self.NAME}: skipped {skipped} non-string entries for {query.describe()}")

        # Reversed exactly once here; pages are plain slices of this tuple.
        items = tuple(
            MediaItem.from_path(path, owner_label=self.owner_label(query, path))
            for path in reversed(files)
        )
        logger.info(f"{self.NAME}: {len(items)} files for {query.describe()}")
        return items


class ProfileListSource(FlatListSource):
    """GET <stories_json_url>/<profile_id>.json"""

    NAME = "profile-list"

    def supports(self, query: FeedQuery) -> bool:
        return isinstance(query, ByProfile)

    def list_url(self, query: FeedQuery) -> str:
        return f"{self.base_url}/{query.profile_id}.json"

    def owner_label(self, query: FeedQuery, path: str) -> str:
        return query.profile_id


class DateBucketSource(FlatListSource):
    """GET <stories_json_url>/<DD.MM.YY>.json"""

    NAME = "date-bucket"

    def supports(self, query: FeedQuery) -> bool:
        return isinstance(query, ByDate)

    def list_url(self, query: FeedQuery) -> str:
        return f"{self.base_url}/{query.key}.json"

    def owner_label(self, query: FeedQuery, path: str) -> str:
        return owner_from_path(path)
