"""Tests for the dashboard controller: loading, filtering, reset and the calculator."""

import asyncio
import itertools
import random
import time

import pytest

from rent_explorer.config import MapConfig
from rent_explorer.dashboard import DashboardController
from rent_explorer.events import (
    BucketClicked,
    DataKind,
    DataLoaded,
    DistrictClicked,
    LoadFailed,
    Overlay,
    OverlayToggled,
    PostalCodeEntered,
    RentQuerySubmitted,
    ResetRequested,
    ZoomSettled,
)
from rent_explorer.io import load_sources
from rent_explorer.legend import BUCKET_COLORS
from rent_explorer.rent_index import NO_MATCH, RentQuery

YELLOW, ORANGE = BUCKET_COLORS[0], BUCKET_COLORS[1]
ALL_DISTRICTS = [0, 1, 2, 3, 4, 5]
# Stop 3 is an unrecognized category, hidden until zoom 16
VISIBLE_AT_START = frozenset({0, 1, 2, 4})


@pytest.fixture
def load_events(districts, network, stops, rent_rows):
    return [
        DataLoaded(DataKind.DISTRICTS, districts),
        DataLoaded(DataKind.NETWORK, network),
        DataLoaded(DataKind.STOPS, stops),
        DataLoaded(DataKind.RENT_TABLE, rent_rows),
    ]


@pytest.fixture
def controller(load_events):
    controller = DashboardController()
    for event in load_events:
        controller.dispatch(event)
    return controller


def _query(postal_code="80331"):
    return RentQuery(newlyConst=0, balcony=1, lift=0, garden=0, serviceCharge=150,
                     livingSpace=65, noRooms=2, postal_code=postal_code)


def _snapshot(state):
    return (
        state.visible_districts,
        state.stop_group.members,
        state.stop_group.zoom,
        len(state.network),
        len(state.rent_index),
        sorted((k.value, v) for k, v in state.load_status.items()),
    )


class TestLoading:
    def test_initial_state(self):
        state = DashboardController().state
        assert state.districts is None
        assert state.viewport.zoom == MapConfig().zoom
        assert not state.all_loaded

    def test_everything_loaded(self, controller):
        state = controller.state
        assert state.all_loaded
        assert state.visible_districts == ALL_DISTRICTS
        assert state.stop_group.members == VISIBLE_AT_START
        assert len(state.network) == 3

    def test_any_order_gives_same_state(self, load_events):
        outcomes = set()
        for order in itertools.permutations(load_events):
            controller = DashboardController()
            for event in order:
                controller.dispatch(event)
            outcomes.add(repr(_snapshot(controller.state)))
        assert len(outcomes) == 1

    def test_filter_chosen_before_districts_arrive(self, districts):
        controller = DashboardController()
        controller.dispatch(BucketClicked(YELLOW))
        controller.dispatch(DataLoaded(DataKind.DISTRICTS, districts))
        assert controller.state.visible_districts == [0, 4]

    def test_zoom_before_stops_arrive(self, stops):
        controller = DashboardController()
        controller.dispatch(ZoomSettled(17))
        controller.dispatch(DataLoaded(DataKind.STOPS, stops))
        assert controller.state.stop_group.zoom == 17
        assert controller.state.stop_group.members == frozenset(s.stop_id for s in stops)

    @pytest.mark.parametrize("seed", range(5))
    def test_concurrent_loads_with_random_delays(self, seed, load_events, controller):
        rng = random.Random(seed)

        def job(payload, delay):
            def run():
                time.sleep(delay)
                return payload
            return run

        jobs = [(e.kind, job(e.payload, rng.uniform(0, 0.05))) for e in load_events]
        concurrent = DashboardController()
        asyncio.run(load_sources(jobs, concurrent.dispatch))
        assert _snapshot(concurrent.state) == _snapshot(controller.state)

    def test_failed_source_leaves_others_usable(self, load_events):
        controller = DashboardController()
        for event in load_events:
            if event.kind is DataKind.STOPS:
                controller.dispatch(LoadFailed(DataKind.STOPS, "missing"))
            else:
                controller.dispatch(event)
        state = controller.state
        assert state.all_loaded
        assert state.load_status[DataKind.STOPS] == "failed"
        assert state.visible_districts == ALL_DISTRICTS
        assert state.stop_group.clusters() == []

    def test_unsupported_event(self):
        with pytest.raises(TypeError):
            DashboardController().dispatch(object())

    def test_revision_increments(self, controller):
        before = controller.revision
        controller.dispatch(ZoomSettled(12))
        assert controller.revision == before + 1


class TestLegendFilter:
    def test_filter_shows_bucket_only(self, controller):
        controller.dispatch(BucketClicked(YELLOW))
        assert controller.state.visible_districts == [0, 4]

    def test_filters_do_not_accumulate(self, controller):
        controller.dispatch(BucketClicked(ORANGE))
        controller.dispatch(BucketClicked(YELLOW))
        assert controller.state.visible_districts == [0, 4]

    def test_data_untouched_by_filter(self, controller, districts):
        controller.dispatch(BucketClicked(ORANGE))
        assert [s.feature for s in controller.state.districts.shapes] == districts


class TestReset:
    def test_restores_full_view(self, controller):
        controller.dispatch(BucketClicked(YELLOW))
        controller.dispatch(OverlayToggled(Overlay.TRAIN_NETWORK, True))
        controller.dispatch(OverlayToggled(Overlay.TRANSIT_STOPS, True))
        controller.dispatch(ZoomSettled(17, {"lat": 48.2, "lon": 11.6}))
        state = controller.dispatch(ResetRequested())

        assert state.visible_districts == ALL_DISTRICTS
        assert state.overlays == set()
        assert state.legend.active_bucket is None
        assert not state.legend.show_train and not state.legend.show_transport
        assert state.viewport.center == state.config.center
        assert state.viewport.zoom == state.config.zoom
        assert state.stop_group.members == VISIBLE_AT_START

    def test_keeps_loaded_data(self, controller):
        network = controller.state.network
        state = controller.dispatch(ResetRequested())
        assert state.network is network
        assert len(state.districts) == 6
        assert len(state.stop_group.stops) == 5
        assert state.rent_index is not None

    def test_idempotent(self, controller):
        first = controller.dispatch(ResetRequested())
        view = (list(first.visible_districts), set(first.overlays), first.legend,
                first.stop_group.members)
        second = controller.dispatch(ResetRequested())
        assert (second.visible_districts, second.overlays, second.legend,
                second.stop_group.members) == view

    def test_moves_the_view(self, controller):
        revision = controller.state.viewport.revision
        controller.dispatch(ResetRequested())
        assert controller.state.viewport.revision == revision + 1

    def test_before_any_data(self):
        state = DashboardController().dispatch(ResetRequested())
        assert state.visible_districts == []


class TestViewport:
    def test_zoom_is_clamped(self, controller):
        controller.dispatch(ZoomSettled(25))
        assert controller.state.viewport.zoom == 18
        controller.dispatch(ZoomSettled(3))
        assert controller.state.viewport.zoom == 11

    def test_unknown_stops_join_at_16(self, controller):
        controller.dispatch(ZoomSettled(16))
        assert 3 in controller.state.stop_group.members


class TestDistricts:
    def test_click_highlights_and_fills_postal_code(self, controller):
        state = controller.dispatch(DistrictClicked(1))
        assert state.districts.highlighted.index == 1
        assert state.postal_code_input == "80333"

    def test_click_switches_highlight(self, controller):
        controller.dispatch(DistrictClicked(1))
        state = controller.dispatch(DistrictClicked(2))
        assert [s.index for s in state.districts.shapes if s.is_highlighted] == [2]

    def test_out_of_range_click_ignored(self, controller):
        state = controller.dispatch(DistrictClicked(42))
        assert state.districts.highlighted is None

    def test_postal_code_entry(self, controller):
        state = controller.dispatch(PostalCodeEntered(" 80336 "))
        assert state.districts.highlighted.index == 3

    def test_unknown_postal_code_keeps_highlight(self, controller):
        controller.dispatch(DistrictClicked(0))
        state = controller.dispatch(PostalCodeEntered("12345"))
        assert state.districts.highlighted.index == 0


class TestRentQuery:
    def test_before_table_loads(self):
        state = DashboardController().dispatch(RentQuerySubmitted(_query()))
        assert state.rent_result is None

    def test_estimate(self, controller):
        state = controller.dispatch(RentQuerySubmitted(_query()))
        assert str(state.rent_result) == "€ 1100.00"

    def test_no_match(self, controller):
        state = controller.dispatch(RentQuerySubmitted(_query("10115")))
        assert state.rent_result is NO_MATCH
