"""Postal-code district shapes, their popups and the single highlight."""

from __future__ import annotations

import html
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from loguru import logger

from .models import DistrictFeature
from .visualization.colors import district_color

DEFAULT_STYLE = {"weight": 2, "color": "white", "fill_opacity": 0.7}
HIGHLIGHT_STYLE = {"weight": 4, "color": "#48ffed", "fill_opacity": 0.9}

POPUP_FIELDS = (
    ("cafe", "Eateries/Food Services"),
    ("education", "Education Facilities"),
    ("healthcare", "Healthcare"),
    ("stores", "Stores"),
    ("hospitality", "Hospitality"),
    ("recreation", "Recreation"),
)


@dataclass(eq=False)
class DistrictShape:
    """One drawn polygon; ``style`` is mutable presentation state."""

    index: int
    feature: DistrictFeature
    style: Dict[str, object] = field(default_factory=lambda: dict(DEFAULT_STYLE))

    @property
    def fill_color(self) -> str:
        return district_color(self.feature.price_area)

    @property
    def is_highlighted(self) -> bool:
        return self.style == HIGHLIGHT_STYLE

    def popup_html(self) -> str:
        f = self.feature
        title = html.escape(f.name) if f.name else "Facilities in Postal Code Area"
        lines = [f"<b>{title}</b>", f"Postal Code: {html.escape(f.postal_code) or '0'}"]
        for key, label in POPUP_FIELDS:
            lines.append(f"{label}: {f.count(key)}")
        if not math.isnan(f.price_area):
            lines.append(f"Avg. rent: € {f.price_area:.2f}/m²")
        return "<br>".join(lines)


class HighlightState:
    """At most one highlighted shape; switching restores the previous one first."""

    def __init__(self) -> None:
        self.current: Optional[DistrictShape] = None

    def highlight(self, shape: DistrictShape) -> None:
        if self.current is not None and self.current is not shape:
            self.current.style = dict(DEFAULT_STYLE)
        shape.style = dict(HIGHLIGHT_STYLE)
        self.current = shape

    def clear(self) -> None:
        if self.current is not None:
            self.current.style = dict(DEFAULT_STYLE)
        self.current = None


class DistrictLayer:
    """All district shapes in creation order plus the highlight pointer."""

    def __init__(self, features: Iterable[DistrictFeature]) -> None:
        self.shapes: List[DistrictShape] = [
            DistrictShape(index=i, feature=f) for i, f in enumerate(features)
        ]
        self.highlight_state = HighlightState()

    def __len__(self) -> int:
        return len(self.shapes)

    def __getitem__(self, index: int) -> DistrictShape:
        return self.shapes[index]

    @property
    def highlighted(self) -> Optional[DistrictShape]:
        return self.highlight_state.current

    def highlight(self, index: int) -> DistrictShape:
        shape = self.shapes[index]
        self.highlight_state.highlight(shape)
        return shape

    def find_by_postal_code(self, postal_code: object) -> Optional[DistrictShape]:
        wanted = str(postal_code).strip() if postal_code is not None else ""
        if not wanted:
            return None
        for shape in self.shapes:
            if shape.feature.postal_code.strip() == wanted:
                return shape
        logger.warning(f"No district found with postal code: {wanted}")
        return None

    def indices_with_color(self, color: Optional[str]) -> List[int]:
        """Indices of shapes drawn in *color*, or of every shape for ``None``."""
        if color is None:
            return [s.index for s in self.shapes]
        return [s.index for s in self.shapes if s.fill_color == color]
