"""Build the map figure from dashboard state."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Dict, List

import plotly.graph_objects as go

from ..clustering import Cluster
from ..events import Overlay
from ..models import StopCategory
from ..visualization.colors import STOP_COLORS, TRAIN_LINE_COLOR, rgba
from . import theme

if TYPE_CHECKING:
    from ..dashboard import DashboardState

DISTRICT_TAG = "district"
STOP_TAG = "stop"
CLUSTER_TAG = "cluster"


def build_map_figure(state: DashboardState) -> go.Figure:
    """Build the complete map: districts, then train network, then stops.

    Each layer is only drawn once its data has loaded; the transit
    layers additionally require their overlay to be switched on.
    """
    fig = go.Figure()

    if state.districts is not None:
        _add_district_traces(fig, state)
    if state.network is not None and Overlay.TRAIN_NETWORK in state.overlays:
        _add_network_trace(fig, state)
    if Overlay.TRANSIT_STOPS in state.overlays:
        _add_stop_traces(fig, state.stop_group.clusters())

    fig.update_layout(_base_layout(state))
    return fig


def _base_layout(state: DashboardState) -> dict:
    view = state.viewport
    return dict(
        map=dict(style=state.config.style, center=view.center, zoom=view.zoom),
        # Only a reset bumps the view revision, so user pan/zoom survives re-renders.
        uirevision=f"view-{view.revision}",
        clickmode="event",
        hovermode="closest",
        showlegend=False,
        paper_bgcolor=theme.BACKGROUND,
        font=dict(family=theme.FONT_STACK, size=12, color=theme.TEXT),
        margin=dict(l=0, r=0, t=0, b=0),
    )


def _add_district_traces(fig: go.Figure, state: DashboardState) -> None:
    """One choropleth trace per fill colour, covering the visible shapes."""
    by_color: Dict[str, List] = defaultdict(list)
    for index in state.visible_districts:
        shape = state.districts[index]
        by_color[shape.fill_color].append(shape)

    for color, shapes in by_color.items():
        features = [
            {
                "type": "Feature",
                "id": str(s.index),
                "geometry": dict(s.feature.geometry),
                "properties": {"plz": s.feature.postal_code},
            }
            for s in shapes
        ]
        fig.add_trace(go.Choroplethmap(
            geojson={"type": "FeatureCollection", "features": features},
            locations=[str(s.index) for s in shapes],
            z=[1] * len(shapes),
            colorscale=[[0, color], [1, color]],
            showscale=False,
            marker=dict(
                opacity=[s.style["fill_opacity"] for s in shapes],
                line=dict(
                    width=[s.style["weight"] for s in shapes],
                    color=[s.style["color"] for s in shapes],
                ),
            ),
            customdata=[[DISTRICT_TAG, s.index] for s in shapes],
            hovertext=[s.popup_html() for s in shapes],
            hoverinfo="text",
            name=f"Districts {color}",
        ))


def _add_network_trace(fig: go.Figure, state: DashboardState) -> None:
    lats: List = []
    lons: List = []
    for path in state.network.paths:
        lats.extend(lat for lat, _ in path)
        lons.extend(lon for _, lon in path)
        lats.append(None)
        lons.append(None)
    fig.add_trace(go.Scattermap(
        lat=lats,
        lon=lons,
        mode="lines",
        line=dict(
            color=rgba(TRAIN_LINE_COLOR, theme.TRAIN_LINE_OPACITY),
            width=theme.TRAIN_LINE_WIDTH,
        ),
        hoverinfo="skip",
        name=Overlay.TRAIN_NETWORK.title,
    ))


def _add_stop_traces(fig: go.Figure, clusters: List[Cluster]) -> None:
    singles = [c for c in clusters if c.is_single]
    groups = [c for c in clusters if not c.is_single]

    by_category: Dict[StopCategory, List] = defaultdict(list)
    for cluster in singles:
        (stop,) = cluster.members
        by_category[stop.category].append(stop)

    for category, stops in by_category.items():
        lats = [s.lat for s in stops]
        lons = [s.lon for s in stops]
        # Scattermap markers have no outline, so a larger white dot sits underneath.
        fig.add_trace(go.Scattermap(
            lat=lats, lon=lons, mode="markers",
            marker=dict(size=theme.STOP_MARKER_SIZE + 2 * theme.STOP_BORDER_WIDTH,
                        color="white", opacity=0.9),
            hoverinfo="skip",
            name=f"{category.label} outline",
        ))
        fig.add_trace(go.Scattermap(
            lat=lats, lon=lons, mode="markers",
            marker=dict(size=theme.STOP_MARKER_SIZE, color=STOP_COLORS[category], opacity=1),
            customdata=[[STOP_TAG, s.stop_id] for s in stops],
            hovertext=[f"<b>{s.name}</b><br>Type: {s.category.label}" for s in stops],
            hoverinfo="text",
            name=category.label,
        ))

    if not groups:
        return

    # Map text styling is per trace, so clusters sharing a label style share a trace.
    by_label: Dict[tuple, List[Cluster]] = defaultdict(list)
    for cluster in groups:
        icon = cluster.icon
        by_label[(icon.text_color, icon.font_size)].append(cluster)

    for (text_color, font_size), members in sorted(by_label.items()):
        icons = [c.icon for c in members]
        lats = [c.lat for c in members]
        lons = [c.lon for c in members]
        fig.add_trace(go.Scattermap(
            lat=lats, lon=lons, mode="markers",
            marker=dict(size=[i.size + 4 for i in icons],
                        color=[i.border_color for i in icons]),
            hoverinfo="skip",
            name="cluster border",
        ))
        fig.add_trace(go.Scattermap(
            lat=lats, lon=lons, mode="markers+text",
            marker=dict(size=[i.size for i in icons], color=[i.color for i in icons]),
            text=[str(i.count) for i in icons],
            textposition="middle center",
            textfont=dict(size=font_size, color=text_color),
            customdata=[[CLUSTER_TAG, c.count] for c in members],
            hovertext=[
                f"<b>{c.count} stops</b><br>Includes: {c.dominant_category.label}"
                for c in members
            ],
            hoverinfo="text",
            name="clusters",
        ))
