"""Immutable records produced by the loaders."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Sequence, Tuple

FACILITY_CATEGORIES = (
    "cafe",
    "education",
    "healthcare",
    "stores",
    "hospitality",
    "recreation",
)


class StopCategory(str, Enum):
    TRAIN_STATION = "train_station"
    TRAM_STOP = "tram_stop"
    BUS_STOP = "bus_stop"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: object) -> "StopCategory":
        """Map a raw ``fclass`` value to a category, ``UNKNOWN`` if unrecognized."""
        value = str(raw).strip().lower() if raw is not None else ""
        if value == "railway_station":
            return cls.TRAIN_STATION
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True)
class DistrictFeature:
    """One postal-code area with its price indicator and facility counts."""

    postal_code: str
    name: str
    price_area: float
    counts: Mapping[str, int] = field(default_factory=dict, hash=False, compare=False)
    geometry: Mapping = field(default_factory=dict, hash=False, compare=False, repr=False)

    def count(self, category: str) -> int:
        return int(self.counts.get(category, 0))


@dataclass(frozen=True)
class TransitStop:
    stop_id: int
    category: StopCategory
    name: str
    lat: float
    lon: float


@dataclass(frozen=True)
class TransitNetwork:
    """Train network as a list of polylines of ``(lat, lon)`` vertices."""

    paths: Tuple[Tuple[Tuple[float, float], ...], ...] = ()

    @classmethod
    def from_paths(cls, paths: Sequence[Sequence[Tuple[float, float]]]) -> "TransitNetwork":
        return cls(tuple(tuple(p) for p in paths if len(p) >= 2))

    def __len__(self) -> int:
        return len(self.paths)
