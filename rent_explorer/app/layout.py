"""Dash layout: calculator sidebar, map area, overlay control and legend.

Every control is always present in the DOM so that callback inputs are
never missing; the legend body is re-rendered from :class:`LegendState`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dash import dcc, html

from ..clustering import icon_for
from ..events import Overlay
from ..models import StopCategory
from ..rent_index import FLAG_COLUMNS
from ..visualization.colors import PRICE_BUCKETS, STOP_COLORS
from . import theme

if TYPE_CHECKING:
    from ..dashboard import DashboardState
    from ..legend import LegendState

FORM_FIELDS = (
    ("newlyConst", "Newly constructed"),
    ("balcony", "Balcony"),
    ("lift", "Lift"),
    ("garden", "Garden"),
    ("serviceCharge", "Service charge (€)"),
    ("livingSpace", "Living space (m²)"),
    ("noRooms", "Number of rooms"),
    ("postal_code", "Postal code"),
)

TRANSPORT_SWATCHES = (
    (StopCategory.BUS_STOP, "Bus Stops"),
    (StopCategory.TRAM_STOP, "Tram Stops"),
    (StopCategory.TRAIN_STATION, "Train Stations"),
)


def build_layout(state: DashboardState) -> html.Div:
    """Return the complete app layout."""
    return html.Div(
        className="app-container",
        children=[
            # ── Left sidebar ──
            html.Div(
                className="left-sidebar",
                style={"width": theme.SIDEBAR_WIDTH},
                children=[
                    html.Div("Rent Explorer", className="sidebar-header"),
                    _calculator_panel(state),
                    html.Div(
                        id="status-bar",
                        className="sidebar-status",
                        children=status_text(state),
                    ),
                ],
            ),
            # ── Main area ──
            html.Div(
                className="main-area",
                children=[
                    dcc.Graph(
                        id="map-graph",
                        config={"scrollZoom": True, "displayModeBar": False},
                        style={"height": "100vh", "width": "100%"},
                    ),
                    html.Div(
                        className="overlay-control",
                        children=[
                            dcc.Checklist(
                                id="overlay-toggle",
                                options=[
                                    {"label": o.title, "value": o.value} for o in Overlay
                                ],
                                value=[o.value for o in state.overlays],
                            ),
                        ],
                    ),
                    html.Div(
                        className="info legend",
                        style={"width": theme.LEGEND_WIDTH},
                        children=[
                            html.H4("Legend"),
                            html.Div(id="legend-body", children=render_legend(state.legend)),
                            html.Button("Reset", id="reset-button", className="btn-reset"),
                            html.Button(
                                state.legend.toggle_label, id="toggle-legend",
                                className="btn-toggle",
                            ),
                        ],
                    ),
                ],
            ),
            # ── Hidden stores ──
            dcc.Store(id="figure-trigger", data=0),
            dcc.Store(id="seen-revision", data=-1),
            dcc.Interval(id="load-poll", interval=500, disabled=state.all_loaded),
        ],
    )


def _calculator_panel(state: DashboardState) -> html.Div:
    options = state.rent_index.options() if state.rent_index is not None else {}
    rows = []
    for field_id, label in FORM_FIELDS:
        rows.append(html.Label(label, htmlFor=field_id))
        rows.append(html.Div(
            className="ctrl-row",
            children=[
                dcc.Dropdown(
                    id=field_id,
                    options=dropdown_options(options.get(field_id, [])),
                    value=None,
                    clearable=field_id not in FLAG_COLUMNS,
                    placeholder="Select...",
                ),
            ],
        ))
    return html.Div(
        className="calculator",
        children=[
            html.H4("Rent Calculator"),
            *rows,
            html.Button("Calculate", id="calculate-btn", className="btn-primary mt-8",
                        style={"width": "100%"}),
            html.Div(id="result", className="result large-font"),
        ],
    )


def dropdown_options(values) -> list[dict]:
    return [{"label": str(v), "value": str(v)} for v in values]


def status_text(state: DashboardState) -> str:
    if not state.load_status:
        return "Loading data..."
    parts = [f"{kind.value}: {status}" for kind, status in sorted(
        state.load_status.items(), key=lambda item: item[0].value
    )]
    return " · ".join(parts)


def render_legend(legend: LegendState) -> list:
    """Render the legend body for *legend*; nothing below the title when collapsed."""
    if not legend.expanded:
        return []

    swatches = []
    for bucket in PRICE_BUCKETS:
        active = bucket.color == legend.active_bucket
        swatches.append(html.Div(
            id={"type": "bucket-swatch", "index": bucket.color},
            className="legend-item" + (" legend-item-active" if active else ""),
            n_clicks=0,
            children=[
                html.Span(className="legend-swatch", style={"background": bucket.color}),
                html.Span(bucket.label),
            ],
        ))

    children = [
        html.H5(
            ["Postal Code Area (Average Rental Price", html.Br(),
             "per Squared Meter (€))"],
            id="percentage-info",
        ),
        html.Div(id="legend-content", children=swatches),
    ]

    symbols = []
    if legend.show_train:
        symbols.append(html.H5(Overlay.TRAIN_NETWORK.title, id="train-heading"))
        symbols.append(html.Div(
            id="train-symbol",
            children=[html.Span(className="train-line"), html.Span("Train Network")],
        ))
    if legend.show_transport:
        symbols.append(html.H5(Overlay.TRANSIT_STOPS.title, id="transport-heading"))
        for category, label in TRANSPORT_SWATCHES:
            symbols.append(html.Div(
                className="transport-symbol",
                children=[
                    html.Img(src=f"/assets/{icon_for(category)}", className="symbol-icon"),
                    html.Span(className="symbol-dot",
                              style={"backgroundColor": STOP_COLORS[category]}),
                    html.Span(label, className="symbol-label"),
                ],
            ))
    children.append(html.Div(className="legend-symbols", children=symbols))
    return children
