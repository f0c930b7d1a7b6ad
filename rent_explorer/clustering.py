"""Cluster markers for transit stops.

Grouping nearby stops is delegated to scikit-learn's :class:`~sklearn.cluster.Birch`,
whose ``threshold`` bounds the radius of each subcluster.  The screen-space
clustering radius is converted to metres for the current zoom, so groups
always look the same size on screen.  This module only decides what a
group *looks like*: icon, colour, size and label styling.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Sequence

import numpy as np
from sklearn.cluster import Birch

from .models import StopCategory, TransitStop
from .visualization.colors import cluster_color

EARTH_RADIUS_M = 6_378_137.0
# Metres per pixel at zoom 0 on the equator for 256 px web-mercator tiles
_METERS_PER_PIXEL_Z0 = 2 * math.pi * EARTH_RADIUS_M / 256

CATEGORY_PRECEDENCE = (
    StopCategory.TRAIN_STATION,
    StopCategory.TRAM_STOP,
    StopCategory.BUS_STOP,
)

ICON_ASSETS = {
    StopCategory.TRAIN_STATION: "symbols/train_station.svg",
    StopCategory.TRAM_STOP: "symbols/tram_stop.svg",
    StopCategory.BUS_STOP: "symbols/bus_stop.svg",
    StopCategory.UNKNOWN: "symbols/default_stop.svg",
}

# Member count above which the icon switches to the dark border / light text
CONTRAST_THRESHOLD = 10


def dominant_category(stops: Iterable[TransitStop]) -> StopCategory:
    """Return the highest-precedence category present among *stops*.

    A single member of a category is enough; unrecognized categories
    only ever yield ``UNKNOWN``.
    """
    present = {getattr(stop, "category", StopCategory.UNKNOWN) for stop in stops}
    for category in CATEGORY_PRECEDENCE:
        if category in present:
            return category
    return StopCategory.UNKNOWN


def icon_for(category: StopCategory) -> str:
    """Return the icon asset for *category*.

    Parameters
    ----------
    category : StopCategory
        Dominant category of a cluster or the category of a single stop.

    Returns
    -------
    str
        Path relative to the Dash assets folder; unrecognized categories
        get the default stop icon.
    """
    return ICON_ASSETS.get(category, ICON_ASSETS[StopCategory.UNKNOWN])


@dataclass(frozen=True)
class ClusterIcon:
    """Presentation of one cluster marker."""

    icon_url: str
    count: int
    size: int
    color: str
    border_color: str
    text_color: str
    font_size: float


def cluster_icon(count: int, category: StopCategory) -> ClusterIcon:
    """Build the marker for a cluster of *count* stops led by *category*."""
    dark = count > CONTRAST_THRESHOLD
    return ClusterIcon(
        icon_url=icon_for(category),
        count=count,
        size=min(40 + count * 2, 60),
        color=cluster_color(count),
        border_color="#333" if dark else "#666",
        text_color="#fff" if dark else "#333",
        font_size=min(14 + count / 2, 18),
    )


def cluster_radius(zoom: float) -> int:
    """Screen-space clustering radius in pixels for *zoom*."""
    if zoom < 12:
        return 80
    if zoom < 14:
        return 60
    if zoom < 16:
        return 40
    return 30


def meters_per_pixel(zoom: float, lat: float) -> float:
    """Ground distance covered by one screen pixel.

    Parameters
    ----------
    zoom : float
        Map zoom level, fractional zooms allowed.
    lat : float
        Latitude in degrees where the distance is measured.

    Returns
    -------
    float
        Metres per pixel for 256 px web-mercator tiles.
    """
    return _METERS_PER_PIXEL_Z0 * math.cos(math.radians(lat)) / (2 ** zoom)


@dataclass(frozen=True)
class Cluster:
    """A group of stops drawn as one marker; ``count == 1`` is a plain stop."""

    members: FrozenSet[TransitStop]
    lat: float
    lon: float

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def is_single(self) -> bool:
        return self.count == 1

    @property
    def dominant_category(self) -> StopCategory:
        return dominant_category(self.members)

    @property
    def icon(self) -> ClusterIcon:
        return cluster_icon(self.count, self.dominant_category)


def _single(stop: TransitStop) -> Cluster:
    return Cluster(frozenset([stop]), stop.lat, stop.lon)


def _project(stops: Sequence[TransitStop]) -> np.ndarray:
    """Equirectangular projection to metres, centred on the stops' mean position."""
    lat = np.array([s.lat for s in stops], dtype=float)
    lon = np.array([s.lon for s in stops], dtype=float)
    lat0 = math.radians(float(lat.mean()))
    x = np.radians(lon - lon.mean()) * math.cos(lat0) * EARTH_RADIUS_M
    y = np.radians(lat - lat.mean()) * EARTH_RADIUS_M
    return np.column_stack((x, y))


def build_clusters(
    stops: Iterable[TransitStop],
    zoom: float,
    radius_px: float,
    disable_at: float,
) -> List[Cluster]:
    """Group *stops* into clusters for the given zoom.

    At or above *disable_at* every stop is returned as its own marker.
    Clusters are ordered by their first member's ``stop_id`` so repeated
    calls with the same inputs give the same output.
    """
    ordered = sorted(stops, key=lambda s: s.stop_id)
    if zoom >= disable_at or len(ordered) < 2:
        return [_single(s) for s in ordered]

    center_lat = float(np.mean([s.lat for s in ordered]))
    threshold = radius_px * meters_per_pixel(zoom, center_lat)
    labels = Birch(threshold=threshold, n_clusters=None).fit_predict(_project(ordered))

    groups: dict[int, list[TransitStop]] = {}
    for stop, label in zip(ordered, labels):
        groups.setdefault(int(label), []).append(stop)

    clusters = []
    for members in groups.values():
        if len(members) == 1:
            clusters.append(_single(members[0]))
            continue
        clusters.append(Cluster(
            members=frozenset(members),
            lat=float(np.mean([m.lat for m in members])),
            lon=float(np.mean([m.lon for m in members])),
        ))
    clusters.sort(key=lambda c: min(m.stop_id for m in c.members))
    return clusters
