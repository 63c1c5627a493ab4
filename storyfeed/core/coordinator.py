from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from storyfeed.core.api.base import FetchError
from storyfeed.core.dto.feed import FeedQuery
from storyfeed.core.dto.media import MediaItem
from storyfeed.core.feed_state import LoadOutcome, LoadTicket, PaginationState
from storyfeed.core.sources.base import FeedSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedEvent:
    """Emitted to listeners after a reset or a non-stale commit."""
    outcome: Optional[LoadOutcome]          # None for a reset
    generation: int
    added: Tuple[MediaItem, ...] = field(default_factory=tuple)
    error: Optional[Exception] = None


FeedListener = Callable[[FeedEvent], None]


class RequestCoordinator:
    """
    Single authority for whether a fetch is still relevant.

    Guarantees:
    - A query change bumps the generation before the first fetch is issued
    - Every fetch is tagged with the generation captured when it started
    - Results from older generations are dropped without side effects
    - At most one fetch per generation (PaginationState.begin_load)
    """

    def __init__(
        self,
        sources: Sequence[FeedSource],
        *,
        page_size: int = 30,
        first_page_size: Optional[int] = None,
        fetch_timeout: Optional[float] = 30.0,
        state: Optional[PaginationState] = None,
    ):
        if not sources:
            raise ValueError("at least one feed source is required")
        if page_size <= 0 or (first_page_size is not None and first_page_size <= 0):
            raise ValueError("page sizes must be > 0")
        self._sources = list(sources)
        self.page_size = page_size
        self.first_page_size = first_page_size or page_size
        self.fetch_timeout = fetch_timeout
        self.state = state or PaginationState()
        self._listeners: List[FeedListener] = []

    # ---------------------------------------------------------
    # Listeners
    # ---------------------------------------------------------

    def add_listener(self, callback: FeedListener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: FeedListener) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def _emit(self, event: FeedEvent) -> None:
        for callback in list(self._listeners):
            callback(event)

    # ---------------------------------------------------------
    # Operations
    # ---------------------------------------------------------

    @property
    def query(self) -> Optional[FeedQuery]:
        return self.state.query

    def source_for(self, query: FeedQuery) -> FeedSource:
        for source in self._sources:
            if source.supports(query):
                return source
        raise LookupError(f"No feed source serves {query.describe()}")

    async def set_query(self, query: FeedQuery) -> LoadOutcome:
        """Start a new generation for query and load its first page."""
        self.source_for(query)
        for source in self._sources:
            source.invalidate()
        generation = self.state.reset(query)
        logger.info(f"Feed query set: {query.describe()} (generation {generation})")
        self._emit(FeedEvent(outcome=None, generation=generation))
        return await self.load_more()

    async def load_more(self) -> LoadOutcome:
        """Fetch the next page unless a fetch is running or the feed is exhausted."""
        ticket = self.state.begin_load()
        if ticket is None:
            return LoadOutcome.SKIPPED
        return await self._run(ticket)

    async def retry(self) -> LoadOutcome:
        """Re-attempt after a failure; identical to load_more by construction."""
        if self.state.last_error is not None:
            logger.info(f"Retrying after error: {self.state.last_error}")
        return await self.load_more()

    async def _run(self, ticket: LoadTicket) -> LoadOutcome:
        query = self.state.query
        source = self.source_for(query)
        size = self.first_page_size if ticket.cursor is None else self.page_size

        try:
            fetch = source.fetch_page(query, ticket.cursor, size)
            if self.fetch_timeout:
                page = await asyncio.wait_for(fetch, timeout=self.fetch_timeout)
            else:
                page = await fetch
        except asyncio.TimeoutError:
            error = FetchError(f"{source.NAME} timed out after {self.fetch_timeout}s for {query.describe()}")
            return self._fail(ticket, error)
        except FetchError as e:
            return self._fail(ticket, e)
        except Exception as e:
            # Not a fetch failure; release the slot and let it propagate.
            self.state.commit_error(ticket.generation, e)
            raise

        if not self.state.commit_page(ticket.generation, page):
            return LoadOutcome.STALE

        added = self.state.last_added
        if self.state.is_empty_result:
            outcome = LoadOutcome.EMPTY
        elif self.state.exhausted:
            outcome = LoadOutcome.EXHAUSTED
        else:
            outcome = LoadOutcome.LOADED
        logger.info(
            f"Loaded {len(added)} item(s) for {query.describe()} "
            f"(generation {ticket.generation}, total {len(self.state.loaded_items)}, {outcome.value})"
        )
        self._emit(FeedEvent(outcome=outcome, generation=ticket.generation, added=added))
        return outcome

    def _fail(self, ticket: LoadTicket, error: FetchError) -> LoadOutcome:
        if not self.state.commit_error(ticket.generation, error):
            return LoadOutcome.STALE
        logger.warning(f"Feed fetch failed (generation {ticket.generation}): {error}")
        self._emit(FeedEvent(outcome=LoadOutcome.FAILED, generation=ticket.generation, error=error))
        return LoadOutcome.FAILED
