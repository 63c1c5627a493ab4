import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from storyfeed.core.dto.feed import Cursor, FeedQuery, Page
from storyfeed.core.dto.media import MediaItem
from storyfeed.core.http_client import HttpClient
from storyfeed.core.sources.base import FeedSource


def make_items(prefix: str, count: int, *, video_every: int = 0) -> Tuple[MediaItem, ...]:
    """Items with ids "<prefix>-0".."<prefix>-N"; every Nth one is a video."""
    items = []
    for i in range(count):
        is_video = bool(video_every) and i % video_every == 0
        path = f"stories/{prefix}/{prefix}-{i}.{'mp4' if is_video else 'jpg'}"
        items.append(MediaItem.from_path(path, owner_label=prefix, item_id=f"{prefix}-{i}"))
    return tuple(items)


class ScriptedSource(FeedSource):
    """
    In-memory source: each query maps to a list of results returned in order
    (a Page or an exception). A gate makes fetches for a query wait.
    """

    NAME = "scripted"

    def __init__(self, script: Dict[FeedQuery, List[object]]):
        super().__init__(HttpClient())
        self.script = {query: list(results) for query, results in script.items()}
        self.gates: Dict[FeedQuery, asyncio.Event] = {}
        self.calls: List[Tuple[FeedQuery, Optional[Cursor], int]] = []
        self.invalidations = 0

    def supports(self, query: FeedQuery) -> bool:
        return query in self.script

    def gate(self, query: FeedQuery) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[query] = event
        return event

    def invalidate(self) -> None:
        self.invalidations += 1

    async def fetch_page(self, query: FeedQuery, cursor: Optional[Cursor], page_size: int) -> Page:
        self.calls.append((query, cursor, page_size))
        gate = self.gates.get(query)
        if gate is not None:
            await gate.wait()
        result = self.script[query].pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeResponse:
    def __init__(self, status: int = 200, payload=None, text: str = ""):
        self.status = status
        self._payload = payload
        self._text = text

    async def json(self, content_type=None):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def get(self, url, params=None):
        self.requests.append((url, params))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class FakeHttpClient(HttpClient):
    def __init__(self, session: FakeSession):
        super().__init__()
        self.session = session

    async def get_async_session(self):
        return self.session


async def drain(trigger) -> None:
    """Wait until the scroll trigger has no scheduled load left."""
    while trigger.pending is not None:
        await trigger.pending


@pytest.fixture
def db(tmp_path):
    from storyfeed.core.database import DatabaseManager

    manager = DatabaseManager(tmp_path / "settings.db")
    manager.connect()
    yield manager
    manager.close()
