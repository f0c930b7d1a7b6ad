"""Tests for the map figure and the callback helpers."""

import pytest

from rent_explorer.app.callbacks import district_from_click, zoom_from_relayout
from rent_explorer.app.figures import CLUSTER_TAG, DISTRICT_TAG, build_map_figure
from rent_explorer.dashboard import DashboardController
from rent_explorer.events import (
    BucketClicked,
    DataKind,
    DataLoaded,
    DistrictClicked,
    Overlay,
    OverlayToggled,
    ResetRequested,
)
from rent_explorer.legend import BUCKET_COLORS


@pytest.fixture
def controller(districts, network, stops):
    controller = DashboardController()
    controller.dispatch(DataLoaded(DataKind.DISTRICTS, districts))
    controller.dispatch(DataLoaded(DataKind.NETWORK, network))
    controller.dispatch(DataLoaded(DataKind.STOPS, stops))
    return controller


def _types(fig):
    return [trace.type for trace in fig.data]


class TestMapFigure:
    def test_empty_before_loading(self):
        fig = build_map_figure(DashboardController().state)
        assert len(fig.data) == 0
        assert fig.layout.map.zoom == 11.6

    def test_one_trace_per_fill_color(self, controller):
        fig = build_map_figure(controller.state)
        # yellow, orange, dark orange, red, gray
        assert _types(fig) == ["choroplethmap"] * 5
        located = sorted(loc for trace in fig.data for loc in trace.locations)
        assert located == ["0", "1", "2", "3", "4", "5"]

    def test_bucket_filter(self, controller):
        controller.dispatch(BucketClicked(BUCKET_COLORS[0]))
        fig = build_map_figure(controller.state)
        assert len(fig.data) == 1
        assert list(fig.data[0].locations) == ["0", "4"]
        assert fig.data[0].customdata[0][0] == DISTRICT_TAG

    def test_highlight_outline(self, controller):
        controller.dispatch(DistrictClicked(0))
        fig = build_map_figure(controller.state)
        yellow = next(t for t in fig.data if "0" in t.locations)
        widths = dict(zip(yellow.locations, yellow.marker.line.width))
        assert widths == {"0": 4, "4": 2}

    def test_overlays_add_transit_layers(self, controller):
        controller.dispatch(OverlayToggled(Overlay.TRAIN_NETWORK, True))
        fig = build_map_figure(controller.state)
        network = [t for t in fig.data if t.type == "scattermap"]
        assert len(network) == 1
        assert list(network[0].lat).count(None) == 3

        controller.dispatch(OverlayToggled(Overlay.TRANSIT_STOPS, True))
        fig = build_map_figure(controller.state)
        assert len([t for t in fig.data if t.type == "scattermap"]) > 1

    def test_clusters_at_start_zoom(self, controller):
        controller.dispatch(OverlayToggled(Overlay.TRANSIT_STOPS, True))
        fig = build_map_figure(controller.state)
        shown = 0
        for trace in fig.data:
            if trace.customdata is None or trace.type != "scattermap":
                continue
            for tag, value in trace.customdata:
                shown += value if tag == CLUSTER_TAG else 1
        assert shown == len(controller.state.stop_group.members)

    def test_reset_changes_view_revision(self, controller):
        before = build_map_figure(controller.state).layout.uirevision
        controller.dispatch(ResetRequested())
        assert build_map_figure(controller.state).layout.uirevision != before


class TestCallbackHelpers:
    def test_zoom_from_relayout(self):
        relayout = {"map.zoom": 13.2, "map.center": {"lat": 48.1, "lon": 11.5}}
        assert zoom_from_relayout(relayout) == (13.2, {"lat": 48.1, "lon": 11.5})

    @pytest.mark.parametrize("relayout", [None, {}, {"autosize": True}, {"map.zoom": "x"}])
    def test_zoom_ignored(self, relayout):
        assert zoom_from_relayout(relayout) is None

    def test_district_from_click(self):
        click = {"points": [{"customdata": [DISTRICT_TAG, 3]}]}
        assert district_from_click(click) == 3

    @pytest.mark.parametrize("click", [
        None,
        {"points": []},
        {"points": [{"customdata": [CLUSTER_TAG, 4]}]},
        {"points": [{"lat": 48.1}]},
    ])
    def test_non_district_click(self, click):
        assert district_from_click(click) is None
