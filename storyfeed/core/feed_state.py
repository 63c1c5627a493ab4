"""
Pagination state machine for one gallery feed.

Transitions: reset -> begin_load -> commit_page | commit_error -> begin_load ...

Every commit carries the generation captured by begin_load; a commit whose
generation is not the current one is a stale response and is dropped
without touching any field.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from storyfeed.core.dto.feed import Cursor, FeedQuery, Page
from storyfeed.core.dto.media import MediaItem

logger = logging.getLogger(__name__)


class LoadOutcome(str, Enum):
    """Result of one load attempt, as reported to callers."""
    LOADED = "loaded"          # page committed, more pages remain
    EXHAUSTED = "exhausted"    # last page committed
    EMPTY = "empty"            # valid response, zero items, nothing loaded at all
    FAILED = "failed"          # fetch failed; retry possible
    STALE = "stale"            # response belonged to an older generation
    SKIPPED = "skipped"        # begin_load refused (loading, exhausted or no query)


@dataclass(frozen=True)
class LoadTicket:
    """What begin_load hands to the fetch: the generation tag and the cursor."""
    generation: int
    cursor: Optional[Cursor]


class WindowStore:
    """Append-only sequence of items, deduplicated by id (first occurrence wins)."""

    def __init__(self):
        self._items: List[MediaItem] = []
        self._ids: Dict[str, int] = {}

    def extend(self, items: Iterable[MediaItem]) -> Tuple[MediaItem, ...]:
        """Append unseen items in order; returns the ones actually appended."""
        added = []
        for item in items:
            if item.id in self._ids:
                continue
            self._ids[item.id] = len(self._items)
            self._items.append(item)
            added.append(item)
        return tuple(added)

    def clear(self) -> None:
        self._items = []
        self._ids = {}

    @property
    def items(self) -> Tuple[MediaItem, ...]:
        return tuple(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(tuple(self._items))


class PaginationState:
    """
    Framework-independent state of one feed session.

    Invariants:
    - exhausted implies cursor is None
    - loading implies at most one fetch in flight for this generation
    """

    def __init__(self):
        self.generation = 0
        self.query: Optional[FeedQuery] = None
        self.cursor: Optional[Cursor] = None
        self.exhausted = False
        self.loading = False
        self.last_error: Optional[Exception] = None
        self.last_added: Tuple[MediaItem, ...] = ()
        self._store = WindowStore()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def reset(self, query: Optional[FeedQuery]) -> int:
        """Start a new generation for query; every in-flight result becomes stale."""
        self.generation += 1
        self.query = query
        self._store.clear()
        self.cursor = None
        self.exhausted = False
        self.loading = False
        self.last_error = None
        self.last_added = ()
        logger.debug(f"Feed reset to generation {self.generation} ({query.describe() if query else 'no query'})")
        return self.generation

    def begin_load(self) -> Optional[LoadTicket]:
        """
        Claim the single fetch slot.

        Returns None (refusal) when a fetch is already running, the feed is
        exhausted, or no query is set.
        """
        if self.loading or self.exhausted or self.query is None:
            return None
        self.loading = True
        return LoadTicket(generation=self.generation, cursor=self.cursor)

    def commit_page(self, generation: int, page: Page) -> bool:
        """Apply a fetched page; returns False when the page was stale and ignored."""
        if generation != self.generation:
            logger.debug(f"Discarding stale page from generation {generation} (current {self.generation})")
            return False
        self.last_added = self._store.extend(page.items)
        self.cursor = page.cursor
        self.exhausted = page.cursor is None
        self.loading = False
        self.last_error = None
        return True

    def commit_error(self, generation: int, error: Exception) -> bool:
        """Record a failed fetch; exhausted is left alone so a retry stays possible."""
        if generation != self.generation:
            logger.debug(f"Discarding stale error from generation {generation}: {error}")
            return False
        self.loading = False
        self.last_error = error
        return True

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def loaded_items(self) -> Tuple[MediaItem, ...]:
        return self._store.items

    @property
    def is_empty_result(self) -> bool:
        """Exhausted with nothing loaded: the query genuinely has no data."""
        return self.exhausted and len(self._store) == 0

    @property
    def can_load_more(self) -> bool:
        return self.query is not None and not self.loading and not self.exhausted

    def __repr__(self) -> str:
        return (
            f"PaginationState(generation={self.generation}, items={len(self._store)}, "
            f"cursor={self.cursor!r}, exhausted={self.exhausted}, loading={self.loading})"
        )
