"""Dashboard controller: the single owner of all presentation state."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

import pandas as pd
from loguru import logger

from . import legend
from .config import MapConfig
from .districts import DistrictLayer
from .events import (
    BucketClicked,
    DataKind,
    DataLoaded,
    DistrictClicked,
    LegendToggled,
    LoadFailed,
    Overlay,
    OverlayToggled,
    PostalCodeEntered,
    RentQuerySubmitted,
    ResetRequested,
    StopsReplaced,
    ZoomSettled,
)
from .legend import LegendState
from .models import TransitNetwork
from .rent_index import LookupResult, RentIndex
from .viewport import ClusterGroupState, VisibilityPolicy


@dataclass
class Viewport:
    """Current map view; ``revision`` changes only when the app moves the view."""

    center: Dict[str, float]
    zoom: float
    revision: int = 0


@dataclass
class DashboardState:
    """Everything the page renders from.

    Loaded datasets are never modified after they arrive; event handlers
    only touch styles, layer membership, legend state and form output.
    """

    config: MapConfig
    viewport: Viewport
    districts: Optional[DistrictLayer] = None
    network: Optional[TransitNetwork] = None
    rent_index: Optional[RentIndex] = None
    stop_group: ClusterGroupState = field(default_factory=ClusterGroupState)
    legend: LegendState = field(default_factory=LegendState)
    overlays: Set[Overlay] = field(default_factory=set)
    visible_districts: List[int] = field(default_factory=list)
    postal_code_input: str = ""
    rent_result: Optional[LookupResult] = None
    load_status: Dict[DataKind, str] = field(default_factory=dict)
    revision: int = 0

    @property
    def all_loaded(self) -> bool:
        """True once every source has either loaded or failed."""
        return all(kind in self.load_status for kind in DataKind)


class DashboardController:
    """Applies events to a :class:`DashboardState`, one at a time."""

    def __init__(
        self,
        config: MapConfig | None = None,
        policy: VisibilityPolicy | None = None,
    ) -> None:
        config = config or MapConfig()
        self.policy = policy or VisibilityPolicy()
        self.state = DashboardState(
            config=config,
            viewport=Viewport(center=config.center, zoom=config.zoom),
        )
        self._lock = threading.Lock()
        self._handlers = {
            DataLoaded: self._on_data_loaded,
            LoadFailed: self._on_load_failed,
            ZoomSettled: self._on_zoom_settled,
            DistrictClicked: self._on_district_clicked,
            PostalCodeEntered: self._on_postal_code,
            BucketClicked: self._on_bucket_clicked,
            OverlayToggled: self._on_overlay_toggled,
            LegendToggled: self._on_legend_toggled,
            ResetRequested: self._on_reset,
            RentQuerySubmitted: self._on_rent_query,
        }

    @property
    def revision(self) -> int:
        return self.state.revision

    def dispatch(self, event) -> DashboardState:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event {type(event).__name__}")
        with self._lock:
            handler(event)
            self.state.revision += 1
            return self.state

    # ------------------------------------------------------------------ #
    #  Loading
    # ------------------------------------------------------------------ #

    def _on_data_loaded(self, event: DataLoaded) -> None:
        s = self.state
        if event.kind is DataKind.DISTRICTS:
            s.districts = DistrictLayer(event.payload)
            s.visible_districts = s.districts.indices_with_color(s.legend.active_bucket)
            detail = f"{len(s.districts)} districts"
        elif event.kind is DataKind.NETWORK:
            s.network = event.payload
            detail = f"{len(s.network)} network paths"
        elif event.kind is DataKind.STOPS:
            stops = StopsReplaced(tuple(event.payload), zoom=s.viewport.zoom)
            s.stop_group = self.policy.handle(stops, s.stop_group)
            detail = f"{len(s.stop_group.stops)} transit stops"
        else:
            payload = event.payload
            s.rent_index = payload if isinstance(payload, RentIndex) else RentIndex(pd.DataFrame(payload))
            detail = f"{len(s.rent_index)} listings"
        s.load_status[event.kind] = "loaded"
        logger.info(f"Loaded {detail}")

    def _on_load_failed(self, event: LoadFailed) -> None:
        self.state.load_status[event.kind] = "failed"
        logger.error(f"{event.kind.value} layer unavailable: {event.reason}")

    # ------------------------------------------------------------------ #
    #  Viewport
    # ------------------------------------------------------------------ #

    def _on_zoom_settled(self, event: ZoomSettled) -> None:
        s = self.state
        zoom = s.config.clamp_zoom(event.zoom)
        s.viewport.zoom = zoom
        if event.center:
            s.viewport.center = dict(event.center)
        s.stop_group = self.policy.handle(ZoomSettled(zoom), s.stop_group)

    # ------------------------------------------------------------------ #
    #  Districts
    # ------------------------------------------------------------------ #

    def _on_district_clicked(self, event: DistrictClicked) -> None:
        s = self.state
        if s.districts is None or not 0 <= event.index < len(s.districts):
            return
        shape = s.districts.highlight(event.index)
        if shape.feature.postal_code:
            s.postal_code_input = shape.feature.postal_code

    def _on_postal_code(self, event: PostalCodeEntered) -> None:
        s = self.state
        s.postal_code_input = str(event.postal_code or "").strip()
        if s.districts is None:
            logger.warning("No district layer available to search")
            return
        shape = s.districts.find_by_postal_code(s.postal_code_input)
        if shape is not None:
            s.districts.highlight_state.highlight(shape)

    # ------------------------------------------------------------------ #
    #  Legend and overlays
    # ------------------------------------------------------------------ #

    def _on_bucket_clicked(self, event: BucketClicked) -> None:
        s = self.state
        s.legend = legend.handle(event, s.legend)
        if s.districts is not None:
            s.visible_districts = s.districts.indices_with_color(s.legend.active_bucket)
            logger.info(
                f"Legend filter {s.legend.active_bucket}: "
                f"{len(s.visible_districts)}/{len(s.districts)} districts shown"
            )

    def _on_overlay_toggled(self, event: OverlayToggled) -> None:
        s = self.state
        if event.visible:
            s.overlays.add(event.overlay)
        else:
            s.overlays.discard(event.overlay)
        s.legend = legend.handle(event, s.legend)

    def _on_legend_toggled(self, event: LegendToggled) -> None:
        self.state.legend = legend.handle(event, self.state.legend)

    def _on_reset(self, event: ResetRequested) -> None:
        reset_dashboard(self.state, self.policy, event)

    # ------------------------------------------------------------------ #
    #  Rent calculator
    # ------------------------------------------------------------------ #

    def _on_rent_query(self, event: RentQuerySubmitted) -> None:
        s = self.state
        if s.rent_index is None:
            logger.warning("Rent table not loaded; ignoring query")
            s.rent_result = None
            return
        s.rent_result = s.rent_index.lookup(event.query)


def reset_dashboard(
    state: DashboardState,
    policy: VisibilityPolicy,
    event: ResetRequested | None = None,
) -> None:
    """Show every district, hide the transit layers and return to the initial view.

    Loaded data stays in memory; calling this on a dashboard already in
    its default state changes nothing but the view revision.
    """
    event = event or ResetRequested()
    if state.districts is not None:
        state.visible_districts = state.districts.indices_with_color(None)
    state.overlays.clear()
    state.legend = legend.handle(event, state.legend)
    state.viewport.center = state.config.center
    state.viewport.zoom = state.config.zoom
    state.viewport.revision += 1
    state.stop_group = policy.handle(ZoomSettled(state.config.zoom), state.stop_group)
    logger.info("Dashboard reset to initial view")
