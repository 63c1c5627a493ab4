"""
Scroll-proximity trigger for incremental loading.

The trigger only needs "boundary became visible / stopped being visible"
events; any source can produce them (a Qt scroll bar, a polling loop, a
test). While the boundary stays visible the trigger keeps loading, one page
at a time, until the feed is exhausted or a fetch fails.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from storyfeed.core.coordinator import FeedEvent, RequestCoordinator
from storyfeed.core.feed_state import LoadOutcome

logger = logging.getLogger(__name__)


DEFAULT_MARGIN_PX = 20

Scheduler = Callable[[Awaitable[Any]], Any]


def is_near_boundary(value: int, maximum: int, margin: int = DEFAULT_MARGIN_PX) -> bool:
    """
    True when a scroll position is within margin pixels of the end.

    A maximum of 0 means the content does not fill the viewport, so the
    boundary is already on screen.
    """
    if maximum <= 0:
        return True
    return maximum - value <= max(0, margin)


class ScrollTrigger:
    """
    Turns boundary visibility into load_more calls.

    The trigger is never consumed: after each commit it re-checks and fires
    again if the boundary is still visible and the feed is not exhausted.
    A failed fetch disarms automatic re-firing until the boundary is
    re-entered or retry() is called.
    """

    def __init__(
        self,
        coordinator: RequestCoordinator,
        *,
        schedule: Optional[Scheduler] = None,
    ):
        self._coordinator = coordinator
        self._schedule = schedule or asyncio.ensure_future
        self._visible = False
        self._pending: Optional[Any] = None
        self._halted_on_error = False
        coordinator.add_listener(self._on_feed_event)

    @property
    def boundary_visible(self) -> bool:
        return self._visible

    @property
    def pending(self):
        """The scheduled load, if one is running."""
        return self._pending

    def on_boundary(self, visible: bool) -> None:
        """Boundary-crossing event from the view."""
        entering = visible and not self._visible
        self._visible = visible
        if entering:
            self._halted_on_error = False
            self._maybe_fire()

    def notify_layout_changed(self) -> None:
        """Call after filter toggles, resizes or a new query's first page."""
        self._maybe_fire()

    def retry(self) -> None:
        self._halted_on_error = False
        self._maybe_fire(force=True)

    def _on_feed_event(self, event: FeedEvent) -> None:
        if event.outcome is None:
            # New query: earlier failures no longer apply.
            self._halted_on_error = False
        elif event.outcome is not LoadOutcome.FAILED:
            self._maybe_fire()

    def _maybe_fire(self, force: bool = False) -> None:
        if not (self._visible or force):
            return
        if self._halted_on_error and not force:
            return
        if self._pending is not None:
            return
        if not self._coordinator.state.can_load_more:
            return
        self._pending = self._schedule(self._load())

    async def _load(self) -> LoadOutcome:
        try:
            outcome = await self._coordinator.load_more()
        finally:
            self._pending = None
        if outcome is LoadOutcome.FAILED:
            self._halted_on_error = True
        elif outcome is not LoadOutcome.SKIPPED:
            # Re-arm: a short page may leave the boundary in view.
            self._maybe_fire()
        logger.debug(f"Scroll trigger load finished: {outcome.value}")
        return outcome
