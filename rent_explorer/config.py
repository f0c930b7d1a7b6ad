"""Static configuration for the map viewport and the input data files."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class MapConfig:
    """Initial view and zoom limits of the map surface."""

    center_lat: float = 48.1552
    center_lon: float = 11.5650
    zoom: float = 11.6
    min_zoom: float = 11.0
    max_zoom: float = 18.0
    style: str = "open-street-map"

    @property
    def center(self) -> dict[str, float]:
        return {"lat": self.center_lat, "lon": self.center_lon}

    def clamp_zoom(self, zoom: float) -> float:
        """Clamp a zoom reported by the map into the configured range."""
        return max(self.min_zoom, min(self.max_zoom, float(zoom)))


@dataclass(frozen=True)
class DataPaths:
    """Locations of the four input files, fetched once at startup."""

    districts: str = os.path.join("Park", "munich_layer.geojson")
    network: str = os.path.join("Park", "Train_network.geojson")
    stops: str = os.path.join("Park", "Transport.geojson")
    rent_table: str = "df_calculator.csv"

    @classmethod
    def from_directory(cls, data_dir: str, **overrides: str | None) -> "DataPaths":
        """Resolve the default file names against *data_dir*.

        Keyword overrides that are not ``None`` replace the resolved path
        verbatim.
        """
        defaults = cls()
        resolved = {
            name: os.path.join(data_dir, getattr(defaults, name))
            for name in ("districts", "network", "stops", "rent_table")
        }
        resolved.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**resolved)
