"""
Qt adapter: turns a QScrollArea's vertical scroll bar into boundary events
for a ScrollTrigger.

The boundary counts as visible when the scroll position is within
margin_px of the end, or when the content is too short to scroll at all.
"""
from typing import Optional
import logging

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QScrollArea

from storyfeed.core.context import FeedContext
from storyfeed.core.scroll_trigger import DEFAULT_MARGIN_PX, ScrollTrigger, is_near_boundary

logger = logging.getLogger(__name__)


class ScrollBoundaryWatcher(QObject):
    """
    Watches a scroll area and reports proximity to its end.

    Signals:
        boundary_changed(visible): Emitted when the boundary enters or leaves view
    """

    boundary_changed = pyqtSignal(bool)

    def __init__(
        self,
        scroll_area: QScrollArea,
        trigger: Optional[ScrollTrigger] = None,
        *,
        margin_px: int = DEFAULT_MARGIN_PX,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent or scroll_area)
        self._scroll_area = scroll_area
        self._trigger = trigger
        self.margin_px = margin_px
        self._visible: Optional[bool] = None

        bar = scroll_area.verticalScrollBar()
        bar.valueChanged.connect(self._on_scroll)
        bar.rangeChanged.connect(self._on_range_changed)

    @classmethod
    def for_context(cls, scroll_area: QScrollArea, context: FeedContext) -> "ScrollBoundaryWatcher":
        """Watcher bound to the context's gallery trigger, using the configured margin."""
        return cls(
            scroll_area,
            context.gallery.trigger,
            margin_px=context.settings.scroll_margin_px,
        )

    @property
    def boundary_visible(self) -> bool:
        return bool(self._visible)

    def check(self) -> bool:
        """Re-evaluate proximity now (e.g. after the grid was rebuilt)."""
        bar = self._scroll_area.verticalScrollBar()
        visible = is_near_boundary(bar.value(), bar.maximum(), self.margin_px)
        if visible != self._visible:
            self._visible = visible
            logger.debug(f"Load boundary {'entered' if visible else 'left'} view")
            self.boundary_changed.emit(visible)
            if self._trigger is not None:
                self._trigger.on_boundary(visible)
        elif visible and self._trigger is not None:
            # Still in view after a layout change: let the trigger re-check.
            self._trigger.notify_layout_changed()
        return visible

    def _on_scroll(self, _value: int):
        self.check()

    def _on_range_changed(self, _minimum: int, _maximum: int):
        self.check()
