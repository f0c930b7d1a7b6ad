"""Legend presentation state and its pure event handler."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from loguru import logger

from .events import BucketClicked, LegendToggled, Overlay, OverlayToggled, ResetRequested
from .visualization.colors import PRICE_BUCKETS

BUCKET_COLORS = tuple(bucket.color for bucket in PRICE_BUCKETS)


@dataclass(frozen=True)
class LegendState:
    """What the legend panel shows.

    ``active_bucket`` is the colour of the selected price bucket; ``None``
    means every district is drawn.
    """

    expanded: bool = False
    active_bucket: Optional[str] = None
    show_train: bool = False
    show_transport: bool = False

    @property
    def toggle_label(self) -> str:
        return "Collapse" if self.expanded else "Expand"


def handle(event, state: LegendState) -> LegendState:
    """Return the legend state after *event*; unrelated events pass through."""
    if isinstance(event, BucketClicked):
        if event.color not in BUCKET_COLORS:
            logger.warning(f"Ignoring unknown legend bucket {event.color}")
            return state
        return replace(state, active_bucket=event.color)
    if isinstance(event, OverlayToggled):
        if event.overlay is Overlay.TRAIN_NETWORK:
            return replace(state, show_train=event.visible)
        return replace(state, show_transport=event.visible)
    if isinstance(event, LegendToggled):
        return replace(state, expanded=not state.expanded)
    if isinstance(event, ResetRequested):
        return replace(state, active_bucket=None, show_train=False, show_transport=False)
    return state
