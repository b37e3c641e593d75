"""Tests for RefreshController: publishing, failures, and superseding."""

import threading
import time

from edudebt.dashboard.state import DashboardState
from edudebt.errors import FetchFailed
from edudebt.models import IndicatorKind
from edudebt.pipeline.aggregator import MultiCountryAggregator
from edudebt.pipeline.refresh import (
    FAILURE_MESSAGE,
    INVALID_MESSAGE,
    RefreshController,
    build_snapshot,
)

from conftest import FakeClient

EDU = IndicatorKind.EDUCATION
DEBT = IndicatorKind.DEBT


def make_controller(**client_kwargs):
    client = FakeClient(**client_kwargs)
    return RefreshController(MultiCountryAggregator(client)), client


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached")
        time.sleep(0.01)


class TestRefresh:

    def test_successful_refresh_publishes(self, e2e_data):
        controller, _ = make_controller(data=e2e_data)
        state = DashboardState(countries=("USA", "BRA"), start_year=2010, end_year=2012)
        result = controller.refresh(state)

        assert result.success
        assert not result.superseded
        assert result.generation == 1
        assert result.api_calls == 4
        assert controller.snapshot is result.snapshot
        assert controller.snapshot.education_rows == [
            {"year": 2010, "USA": 5.0},
            {"year": 2011, "USA": 6.0, "BRA": 4.0},
        ]
        assert controller.last_result is result

    def test_snapshot_contents(self, e2e_data):
        controller, _ = make_controller(data=e2e_data)
        state = DashboardState(countries=("USA", "BRA"), start_year=2010, end_year=2012)
        snapshot = controller.refresh(state).snapshot

        assert snapshot.countries == ["USA", "BRA"]
        assert snapshot.debt_rows == [
            {"year": 2010, "BRA": 350e9},
            {"year": 2012, "BRA": 410e9},
        ]
        assert snapshot.rows_for(DEBT) == [
            {"year": 2010, "BRA": 350.0},
            {"year": 2012, "BRA": 410.0},
        ]
        assert snapshot.rows_for(DEBT, in_billions=False) == snapshot.debt_rows
        assert snapshot.rows_for(EDU) == snapshot.education_rows
        assert len(snapshot.summary_for("BRA")) == 2

    def test_lowercase_codes_keep_their_data(self, e2e_data):
        controller, client = make_controller(data=e2e_data)
        state = DashboardState(countries=("usa",), start_year=2010, end_year=2012)
        result = controller.refresh(state)

        assert {(c, k) for c, k, _, _ in client.calls} == {("USA", EDU), ("USA", DEBT)}
        assert result.snapshot.countries == ["USA"]
        assert result.snapshot.education_rows == [
            {"year": 2010, "USA": 5.0},
            {"year": 2011, "USA": 6.0},
        ]
        edu, _ = result.snapshot.summary_for("USA")
        assert edu.has_data
        assert result.warnings == []

    def test_to_dict_is_json_safe(self, e2e_data):
        controller, _ = make_controller(data=e2e_data)
        d = controller.refresh(DashboardState(countries=("USA",))).to_dict()
        assert d["success"] is True
        assert "snapshot" not in d
        assert isinstance(d["started_at"], str)


class TestFailures:

    def test_fetch_failure_keeps_last_snapshot(self, e2e_data):
        controller, client = make_controller(data=e2e_data)
        good = controller.refresh(DashboardState(countries=("USA",), start_year=2010, end_year=2012))

        client.failures[("BRA", DEBT)] = FetchFailed("BRA", "DT.DOD.DECT.CD", "HTTP 500")
        new_state = DashboardState(countries=("USA", "BRA"), start_year=2010, end_year=2012)
        bad = controller.refresh(new_state)

        assert not bad.success
        assert bad.snapshot is None
        assert bad.message == FAILURE_MESSAGE
        assert "BRA" in bad.error
        assert bad.errors == 1
        assert controller.snapshot is good.snapshot
        assert controller.state == new_state
        assert controller.last_result is bad

    def test_invalid_selection(self):
        controller, client = make_controller()
        result = controller.refresh(DashboardState(countries=("USA",), start_year=2015, end_year=2010))
        assert not result.success
        assert result.message == INVALID_MESSAGE
        assert client.calls == []
        assert controller.snapshot is None

    def test_recovers_on_retrigger(self, e2e_data):
        controller, client = make_controller(
            data=e2e_data,
            failures={("USA", EDU): FetchFailed("USA", "SE.XPD.TOTL.GB.ZS")},
        )
        state = DashboardState(countries=("USA",), start_year=2010, end_year=2012)
        assert not controller.refresh(state).success

        client.failures.clear()
        assert controller.refresh(state).success
        assert controller.snapshot is not None


class TestSupersede:

    def test_latest_refresh_wins(self, e2e_data):
        """A slow first refresh finishing late must not replace the second."""
        gate = threading.Event()
        controller, client = make_controller(data=e2e_data, delays={"USA": gate})
        try:
            first = controller.refresh_async(
                DashboardState(countries=("USA",), start_year=2010, end_year=2012)
            )
            wait_until(lambda: len(client.calls) >= 2)

            second = controller.refresh(
                DashboardState(countries=("BRA",), start_year=2010, end_year=2012)
            )
            gate.set()
            stale = first.result(timeout=5)
        finally:
            controller.shutdown()

        assert second.success and not second.superseded
        assert stale.superseded
        assert stale.generation < second.generation
        assert stale.api_calls == 2
        assert second.api_calls == 2
        assert controller.snapshot is second.snapshot
        assert list(controller.snapshot.series_by_country) == ["BRA"]
        assert controller.last_result is second

    def test_stale_failure_is_ignored(self, e2e_data):
        gate = threading.Event()
        controller, client = make_controller(
            data=e2e_data,
            delays={"USA": gate},
            failures={("USA", DEBT): FetchFailed("USA", "DT.DOD.DECT.CD")},
        )
        try:
            first = controller.refresh_async(DashboardState(countries=("USA",)))
            wait_until(lambda: len(client.calls) >= 2)
            second = controller.refresh(DashboardState(countries=("BRA",)))
            gate.set()
            stale = first.result(timeout=5)
        finally:
            controller.shutdown()

        assert not stale.success and stale.superseded
        assert controller.last_result is second
        assert controller.snapshot is second.snapshot

    def test_is_current(self, e2e_data):
        controller, _ = make_controller(data=e2e_data)
        controller.refresh(DashboardState(countries=("USA",)))
        assert controller.is_current(controller.generation)
        assert not controller.is_current(controller.generation - 1)


class TestQualityWarnings:

    def test_out_of_range_value_warns(self):
        data = {("USA", EDU): [(2010, 150.0)]}
        controller, _ = make_controller(data=data)
        result = controller.refresh(DashboardState(countries=("USA",), start_year=2010, end_year=2012))
        assert result.success
        assert any("USA_education" in w for w in result.warnings)

    def test_clean_data_has_no_warnings(self, e2e_data):
        controller, _ = make_controller(data=e2e_data)
        result = controller.refresh(DashboardState(countries=("USA", "BRA"), start_year=2010, end_year=2012))
        assert result.warnings == []


def test_build_snapshot_without_network(sample_series):
    state = DashboardState(countries=("USA", "BRA"), start_year=2010, end_year=2012)
    snapshot = build_snapshot(state, sample_series)
    assert snapshot.combined_rows[0] == {"year": 2010, "USA_education": 5.0, "BRA_debt": 350e9}
    assert [s.country for s in snapshot.summaries] == ["USA", "USA", "BRA", "BRA"]
