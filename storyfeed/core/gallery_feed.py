from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional, Tuple

from storyfeed.core.coordinator import RequestCoordinator
from storyfeed.core.dto.feed import ByDate, ByProfile, FeedQuery
from storyfeed.core.dto.media import MediaItem
from storyfeed.core.feed_state import LoadOutcome
from storyfeed.core.filters import FilterState, visible_window
from storyfeed.core.scroll_trigger import ScrollTrigger

logger = logging.getLogger(__name__)


def yesterday(today: Optional[date] = None) -> date:
    """The gallery opens on the previous day's stories."""
    return (today or date.today()) - timedelta(days=1)


class GalleryFeed:
    """
    One gallery screen's feed: query selection, live filters and the
    scroll trigger over a single RequestCoordinator.

    Zero UI logic; a view binds its widgets to these methods.
    """

    def __init__(self, coordinator: RequestCoordinator, *, trigger: Optional[ScrollTrigger] = None):
        self.coordinator = coordinator
        self.trigger = trigger or ScrollTrigger(coordinator)
        self.filters = FilterState()

    # ---------------------------------------------------------
    # Query selection
    # ---------------------------------------------------------

    @property
    def query(self) -> Optional[FeedQuery]:
        return self.coordinator.query

    @property
    def selected_date(self) -> Optional[date]:
        query = self.query
        return query.date if isinstance(query, ByDate) else None

    @property
    def selected_profile(self) -> Optional[str]:
        query = self.query
        return query.profile_id if isinstance(query, ByProfile) else None

    async def open(self, today: Optional[date] = None) -> LoadOutcome:
        return await self.select_date(yesterday(today))

    async def select_date(self, day: date) -> LoadOutcome:
        return await self.coordinator.set_query(ByDate(day))

    async def select_profile(self, profile_id: str) -> LoadOutcome:
        if not profile_id:
            raise ValueError("profile_id must not be empty")
        return await self.coordinator.set_query(ByProfile(profile_id))

    async def load_more(self) -> LoadOutcome:
        return await self.coordinator.load_more()

    async def retry(self) -> LoadOutcome:
        return await self.coordinator.retry()

    # ---------------------------------------------------------
    # Filters
    # ---------------------------------------------------------

    def toggle_photos(self) -> FilterState:
        return self.set_filters(self.filters.toggle_photos())

    def toggle_videos(self) -> FilterState:
        return self.set_filters(self.filters.toggle_videos())

    def set_filters(self, filters: FilterState) -> FilterState:
        self.filters = filters
        # A shorter window can bring the load boundary into view.
        self.trigger.notify_layout_changed()
        return filters

    # ---------------------------------------------------------
    # Views
    # ---------------------------------------------------------

    @property
    def loaded_items(self) -> Tuple[MediaItem, ...]:
        return self.coordinator.state.loaded_items

    @property
    def visible_items(self) -> Tuple[MediaItem, ...]:
        return visible_window(self.coordinator.state.loaded_items, self.filters)

    @property
    def loading(self) -> bool:
        return self.coordinator.state.loading

    @property
    def exhausted(self) -> bool:
        return self.coordinator.state.exhausted

    @property
    def error(self) -> Optional[Exception]:
        return self.coordinator.state.last_error

    @property
    def is_empty_result(self) -> bool:
        return self.coordinator.state.is_empty_result

    def status_text(self) -> str:
        if self.loading:
            return "Loading more..."
        if self.error is not None:
            return "Error loading media. Please try again."
        if self.is_empty_result:
            return "Nothing posted for this selection"
        if self.exhausted:
            return "No more items to load"
        return ""
