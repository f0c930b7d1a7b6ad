"""All Dash callbacks for the rent explorer.

Each input callback turns its trigger into one event, dispatches it and
bumps ``figure-trigger``; a single render callback then redraws the map,
the legend and the status bar from controller state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dash import ALL, Input, Output, State, callback_context, no_update
from dash.exceptions import PreventUpdate

from ..events import (
    BucketClicked,
    DistrictClicked,
    LegendToggled,
    Overlay,
    OverlayToggled,
    PostalCodeEntered,
    RentQuerySubmitted,
    ResetRequested,
    ZoomSettled,
)
from ..rent_index import RentQuery
from .figures import DISTRICT_TAG, build_map_figure
from .layout import FORM_FIELDS, dropdown_options, render_legend, status_text

if TYPE_CHECKING:
    from ..dashboard import DashboardController

_FORM_IDS = [field_id for field_id, _ in FORM_FIELDS]


def zoom_from_relayout(relayout: dict | None) -> tuple[float, dict | None] | None:
    """Extract ``(zoom, center)`` from map relayout data, or ``None``."""
    if not isinstance(relayout, dict):
        return None
    zoom = relayout.get("map.zoom", relayout.get("mapbox.zoom"))
    if not isinstance(zoom, (int, float)):
        return None
    center = relayout.get("map.center", relayout.get("mapbox.center"))
    return float(zoom), center if isinstance(center, dict) else None


def district_from_click(click_data: dict | None) -> int | None:
    """Return the district index of a map click, ``None`` for anything else."""
    if not click_data or not click_data.get("points"):
        return None
    custom = click_data["points"][0].get("customdata")
    if isinstance(custom, (list, tuple)) and len(custom) == 2 and custom[0] == DISTRICT_TAG:
        return int(custom[1])
    return None


def register(app, controller: DashboardController) -> None:
    """Register all callbacks on the Dash app instance."""

    def _bump(trigger):
        return (trigger or 0) + 1

    # ------------------------------------------------------------------ #
    #  Render
    # ------------------------------------------------------------------ #

    @app.callback(
        Output("map-graph", "figure"),
        Output("legend-body", "children"),
        Output("toggle-legend", "children"),
        Output("reset-button", "style"),
        Output("status-bar", "children"),
        Input("figure-trigger", "data"),
    )
    def render(_trigger):
        state = controller.state
        reset_style = {"display": "inline-block" if state.legend.expanded else "none"}
        return (
            build_map_figure(state),
            render_legend(state.legend),
            state.legend.toggle_label,
            reset_style,
            status_text(state),
        )

    # ------------------------------------------------------------------ #
    #  Background load polling
    # ------------------------------------------------------------------ #

    @app.callback(
        Output("figure-trigger", "data", allow_duplicate=True),
        Output("seen-revision", "data"),
        Output("load-poll", "disabled"),
        *[Output(field_id, "options") for field_id in _FORM_IDS],
        Input("load-poll", "n_intervals"),
        State("seen-revision", "data"),
        State("figure-trigger", "data"),
        prevent_initial_call=True,
    )
    def poll_loads(_n, seen, trigger):
        state = controller.state
        if state.revision == seen:
            raise PreventUpdate
        if state.rent_index is not None:
            options = state.rent_index.options()
            field_options = [dropdown_options(options.get(f, [])) for f in _FORM_IDS]
        else:
            field_options = [no_update] * len(_FORM_IDS)
        return (_bump(trigger), state.revision, state.all_loaded, *field_options)

    # ------------------------------------------------------------------ #
    #  Zoom settle
    # ------------------------------------------------------------------ #

    @app.callback(
        Output("figure-trigger", "data", allow_duplicate=True),
        Input("map-graph", "relayoutData"),
        State("figure-trigger", "data"),
        prevent_initial_call=True,
    )
    def on_zoom(relayout, trigger):
        settled = zoom_from_relayout(relayout)
        if settled is None:
            raise PreventUpdate
        zoom, center = settled
        before = controller.state.stop_group
        controller.dispatch(ZoomSettled(zoom, center))
        if controller.state.stop_group is before:
            raise PreventUpdate
        return _bump(trigger)

    # ------------------------------------------------------------------ #
    #  District click / postal code
    # ------------------------------------------------------------------ #

    @app.callback(
        Output("figure-trigger", "data", allow_duplicate=True),
        Output("postal_code", "value"),
        Input("map-graph", "clickData"),
        State("figure-trigger", "data"),
        prevent_initial_call=True,
    )
    def on_map_click(click_data, trigger):
        index = district_from_click(click_data)
        if index is None:
            raise PreventUpdate
        state = controller.dispatch(DistrictClicked(index))
        return _bump(trigger), state.postal_code_input or no_update

    @app.callback(
        Output("figure-trigger", "data", allow_duplicate=True),
        Input("postal_code", "value"),
        State("figure-trigger", "data"),
        prevent_initial_call=True,
    )
    def on_postal_code(postal_code, trigger):
        if not postal_code:
            raise PreventUpdate
        if postal_code == controller.state.postal_code_input:
            # Echo of a district click; the shape is already highlighted.
            raise PreventUpdate
        controller.dispatch(PostalCodeEntered(postal_code))
        return _bump(trigger)

    # ------------------------------------------------------------------ #
    #  Legend, overlays, reset
    # ------------------------------------------------------------------ #

    @app.callback(
        Output("figure-trigger", "data", allow_duplicate=True),
        Input({"type": "bucket-swatch", "index": ALL}, "n_clicks"),
        State("figure-trigger", "data"),
        prevent_initial_call=True,
    )
    def on_bucket(clicks, trigger):
        ctx = callback_context
        if not ctx.triggered or not ctx.triggered[0].get("value"):
            raise PreventUpdate
        controller.dispatch(BucketClicked(ctx.triggered_id["index"]))
        return _bump(trigger)

    @app.callback(
        Output("figure-trigger", "data", allow_duplicate=True),
        Input("overlay-toggle", "value"),
        State("figure-trigger", "data"),
        prevent_initial_call=True,
    )
    def on_overlay(values, trigger):
        wanted = {Overlay(v) for v in values or []}
        current = set(controller.state.overlays)
        if wanted == current:
            raise PreventUpdate
        for overlay in Overlay:
            if (overlay in wanted) != (overlay in current):
                controller.dispatch(OverlayToggled(overlay, overlay in wanted))
        return _bump(trigger)

    @app.callback(
        Output("figure-trigger", "data", allow_duplicate=True),
        Input("toggle-legend", "n_clicks"),
        State("figure-trigger", "data"),
        prevent_initial_call=True,
    )
    def on_legend_toggle(n_clicks, trigger):
        if not n_clicks:
            raise PreventUpdate
        controller.dispatch(LegendToggled())
        return _bump(trigger)

    @app.callback(
        Output("figure-trigger", "data", allow_duplicate=True),
        Output("overlay-toggle", "value"),
        Input("reset-button", "n_clicks"),
        State("figure-trigger", "data"),
        prevent_initial_call=True,
    )
    def on_reset(n_clicks, trigger):
        if not n_clicks:
            raise PreventUpdate
        controller.dispatch(ResetRequested())
        return _bump(trigger), []

    # ------------------------------------------------------------------ #
    #  Rent calculator
    # ------------------------------------------------------------------ #

    @app.callback(
        Output("result", "children"),
        Input("calculate-btn", "n_clicks"),
        *[State(field_id, "value") for field_id in _FORM_IDS],
        prevent_initial_call=True,
    )
    def on_calculate(n_clicks, *values):
        if not n_clicks:
            raise PreventUpdate
        query = RentQuery.from_form(dict(zip(_FORM_IDS, values)))
        state = controller.dispatch(RentQuerySubmitted(query))
        if state.rent_result is None:
            return "Rent data is not available."
        return str(state.rent_result)
