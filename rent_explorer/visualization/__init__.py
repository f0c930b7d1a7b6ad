"""Colour scales shared by the map figure and the legend."""

from .colors import (
    CLUSTER_SHADES,
    GRAY,
    PRICE_BUCKETS,
    STOP_COLORS,
    TRAIN_LINE_COLOR,
    WHITE,
    PriceBucket,
    cluster_color,
    district_color,
    hex_to_rgb,
    rgba,
)

__all__ = [
    "CLUSTER_SHADES",
    "GRAY",
    "PRICE_BUCKETS",
    "STOP_COLORS",
    "TRAIN_LINE_COLOR",
    "WHITE",
    "PriceBucket",
    "cluster_color",
    "district_color",
    "hex_to_rgb",
    "rgba",
]
