"""Zoom-driven visibility of transit stops and the stop cluster group."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Mapping, Optional, Tuple

from loguru import logger

from .clustering import Cluster, build_clusters, cluster_radius
from .events import StopsReplaced, ZoomSettled
from .models import StopCategory, TransitStop

DEFAULT_MIN_ZOOM: Mapping[StopCategory, float] = {
    StopCategory.TRAIN_STATION: 11,
    StopCategory.TRAM_STOP: 11,
    StopCategory.BUS_STOP: 11,
    StopCategory.UNKNOWN: 16,
}


@dataclass(frozen=True)
class ClusterSettings:
    """Upper bound on the clustering radius and the zoom where clustering stops."""

    max_radius: int
    disable_at: float


# (exclusive upper zoom, settings)
ZOOM_BANDS: Tuple[Tuple[float, ClusterSettings], ...] = (
    (12, ClusterSettings(max_radius=100, disable_at=16)),
    (14, ClusterSettings(max_radius=80, disable_at=18)),
)
TOP_BAND = ClusterSettings(max_radius=60, disable_at=20)


def cluster_settings(zoom: float) -> ClusterSettings:
    for upper, settings in ZOOM_BANDS:
        if zoom < upper:
            return settings
    return TOP_BAND


@dataclass(frozen=True)
class ClusterGroupState:
    """Membership of the stop cluster group at a given zoom.

    ``stops`` is every loaded stop; ``members`` holds the ``stop_id`` of
    those currently added to the group.  ``revision`` increases each time
    membership or settings actually change.
    """

    stops: Tuple[TransitStop, ...] = ()
    zoom: Optional[float] = None
    members: FrozenSet[int] = frozenset()
    settings: Optional[ClusterSettings] = None
    revision: int = 0

    @property
    def radius(self) -> int:
        """Clustering radius for the current zoom, capped by the zoom band."""
        if self.zoom is None:
            return 0
        radius = cluster_radius(self.zoom)
        if self.settings is not None:
            radius = min(radius, self.settings.max_radius)
        return radius

    def member_stops(self) -> List[TransitStop]:
        return [s for s in self.stops if s.stop_id in self.members]

    def clusters(self) -> List[Cluster]:
        """Recompute the clusters from scratch for the current membership."""
        if self.zoom is None or not self.members:
            return []
        settings = self.settings or cluster_settings(self.zoom)
        return build_clusters(
            self.member_stops(), self.zoom, self.radius, settings.disable_at
        )


@dataclass
class VisibilityPolicy:
    """Decides which stops belong to the cluster group at a zoom level.

    Each category has its own minimum zoom; categories missing from
    ``min_zoom`` fall back to the ``UNKNOWN`` threshold.
    """

    min_zoom: Mapping[StopCategory, float] = field(
        default_factory=lambda: dict(DEFAULT_MIN_ZOOM)
    )

    def min_zoom_for(self, category: StopCategory) -> float:
        if category in self.min_zoom:
            return self.min_zoom[category]
        return self.min_zoom.get(StopCategory.UNKNOWN, DEFAULT_MIN_ZOOM[StopCategory.UNKNOWN])

    def is_visible(self, stop: TransitStop, zoom: float) -> bool:
        return zoom >= self.min_zoom_for(stop.category)

    def visible_members(self, stops: Tuple[TransitStop, ...], zoom: float) -> FrozenSet[int]:
        return frozenset(s.stop_id for s in stops if self.is_visible(s, zoom))

    def handle(self, event, state: ClusterGroupState) -> ClusterGroupState:
        """Return the group state after *event*.

        Unchanged zoom and stops give back *state* itself, so repeated
        zoom-settle events are no-ops.
        """
        if isinstance(event, StopsReplaced):
            stops, zoom = tuple(event.stops), state.zoom
            if zoom is None:
                zoom = event.zoom
        elif isinstance(event, ZoomSettled):
            stops, zoom = state.stops, event.zoom
        else:
            return state

        if zoom is None:
            return replace(state, stops=stops)

        members = self.visible_members(stops, zoom)
        settings = cluster_settings(zoom)
        if (
            stops == state.stops
            and members == state.members
            and settings == state.settings
            and zoom == state.zoom
        ):
            return state

        added = len(members - state.members)
        removed = len(state.members - members)
        logger.debug(
            f"Zoom {zoom:.2f}: {len(members)}/{len(stops)} stops in cluster group "
            f"(+{added}/-{removed}), radius <= {settings.max_radius}px, "
            f"clustering off at {settings.disable_at}"
        )
        return ClusterGroupState(
            stops=stops,
            zoom=zoom,
            members=members,
            settings=settings,
            revision=state.revision + 1,
        )
