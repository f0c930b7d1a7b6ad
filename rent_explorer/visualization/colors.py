"""Colour scales for district prices, cluster sizes and stop categories."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from matplotlib import colors as mcolors

from ..models import StopCategory

WHITE = "#FFFFFF"
GRAY = "#808080"

# Lower bound of the first coloured bucket; anything cheaper is white.
PRICE_FLOOR = 10.98


@dataclass(frozen=True)
class PriceBucket:
    """One legend interval of average rent per square metre."""

    lower: float
    upper: float
    label: str
    color: str


PRICE_BUCKETS: Tuple[PriceBucket, ...] = (
    PriceBucket(10.98, 18.14, "10.98–18.14", "#FFEDA0"),
    PriceBucket(18.15, 20.87, "18.15–20.87", "#FEB24C"),
    PriceBucket(20.88, 24.44, "20.88–24.44", "#FD8D3C"),
    PriceBucket(24.45, 28.30, "24.45–28.30", "#E31A1C"),
)

# (exclusive lower threshold, shade), highest threshold first
CLUSTER_SHADES: Tuple[Tuple[int, str], ...] = (
    (50, "#8c2d04"),
    (20, "#d94801"),
    (10, "#f16913"),
    (5, "#fd8d3c"),
    (2, "#fdae6b"),
)
CLUSTER_BASE_SHADE = "#feedde"

STOP_COLORS = {
    StopCategory.BUS_STOP: "#2d5fea",
    StopCategory.TRAM_STOP: "#00F539",
    StopCategory.TRAIN_STATION: "red",
    StopCategory.UNKNOWN: "gray",
}

TRAIN_LINE_COLOR = "#264dfc"


def as_price(value: object) -> float:
    """Coerce a raw price attribute to float; missing or non-numeric is NaN."""
    if value is None or isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def district_color(value: object) -> str:
    """Return the fill colour for an average price per square metre.

    The NaN sentinel (float NaN, the string ``"NaN"``, ``None``) and
    values above the top bucket are gray; values below the first bucket
    are white.
    """
    price = as_price(value)
    if math.isnan(price):
        return GRAY
    if price < PRICE_FLOOR:
        return WHITE
    for bucket in PRICE_BUCKETS:
        if price <= bucket.upper:
            return bucket.color
    return GRAY


def cluster_color(count: int) -> str:
    """Return the fill shade for a cluster of *count* stops."""
    for threshold, shade in CLUSTER_SHADES:
        if count > threshold:
            return shade
    return CLUSTER_BASE_SHADE


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert a colour string (e.g. ``'#1f77b4'`` or ``'red'``) to ``(R, G, B)``."""
    try:
        rgb_float = mcolors.to_rgb(hex_color)
        return tuple(int(round(c * 255)) for c in rgb_float)
    except ValueError:
        return (0, 0, 0)


def rgba(color: str, alpha: float) -> str:
    """Return a CSS ``rgba()`` string for *color* at opacity *alpha*."""
    r, g, b = hex_to_rgb(color)
    return f"rgba({r},{g},{b},{alpha})"
