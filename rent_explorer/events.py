"""Messages dispatched into the dashboard controller.

UI callbacks and the background loader never mutate presentation state
directly; they build one of these and hand it to
:meth:`DashboardController.dispatch`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence


class DataKind(str, Enum):
    DISTRICTS = "districts"
    NETWORK = "network"
    STOPS = "stops"
    RENT_TABLE = "rent_table"


class Overlay(str, Enum):
    TRAIN_NETWORK = "train"
    TRANSIT_STOPS = "transport"

    @property
    def title(self) -> str:
        return "Train Network" if self is Overlay.TRAIN_NETWORK else "Transport Stops/Stations"


@dataclass(frozen=True)
class DataLoaded:
    kind: DataKind
    payload: Any


@dataclass(frozen=True)
class LoadFailed:
    kind: DataKind
    reason: str


@dataclass(frozen=True)
class ZoomSettled:
    zoom: float
    center: Optional[dict] = None


@dataclass(frozen=True)
class StopsReplaced:
    """New stop set for the cluster group; *zoom* is used if none has settled yet."""

    stops: Sequence
    zoom: Optional[float] = None


@dataclass(frozen=True)
class DistrictClicked:
    index: int


@dataclass(frozen=True)
class PostalCodeEntered:
    postal_code: str


@dataclass(frozen=True)
class BucketClicked:
    color: str


@dataclass(frozen=True)
class OverlayToggled:
    overlay: Overlay
    visible: bool


@dataclass(frozen=True)
class LegendToggled:
    pass


@dataclass(frozen=True)
class ResetRequested:
    pass


@dataclass(frozen=True)
class RentQuerySubmitted:
    query: Any
