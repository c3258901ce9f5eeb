"""Tests for threshold classification, aggregation and incident edge detection."""

import math

import pytest

from src.qc.application.status_evaluator import StatusEvaluator, aggregate_status, classify_value
from src.qc.application.threshold_store import ThresholdStore
from src.qc.domain.exceptions import PersistenceError
from src.qc.domain.models import NO_THRESHOLD_NOTE, UNAVAILABLE_NOTE, ParameterStatus, QCStatus, ThresholdBand
from tests.helpers.factories import make_reading


class _FailingSink:
    def __init__(self):
        self.attempts = 0

    def write_incident(self, record) -> None:
        self.attempts += 1
        raise PersistenceError("incidents.jsonl", OSError("disk full"))


class _BrokenSink:
    def write_incident(self, record) -> None:
        raise RuntimeError("sink crashed")


class _FailingRepository:
    def load(self):
        return {}

    def save(self, bands) -> None:
        raise PersistenceError("thresholds.yaml", OSError("read-only file system"))


# ---------------------------------------------------------------------------
# Per-value classification
# ---------------------------------------------------------------------------


class TestClassifyValue:
    def test_degasser_examples(self) -> None:
        band = ThresholdBand(display_name="T Degasser", min=0, max=150, warning_margin=0.1)
        assert classify_value(170, band) == QCStatus.RED
        assert classify_value(145, band) == QCStatus.YELLOW
        assert classify_value(100, band) == QCStatus.GREEN

    def test_below_min_is_red(self) -> None:
        band = ThresholdBand(min=0, max=100, warning_margin=0.25)
        assert classify_value(-0.1, band) == QCStatus.RED

    def test_band_edges_are_yellow_not_red(self) -> None:
        band = ThresholdBand(min=0, max=100, warning_margin=0.25)
        assert classify_value(0, band) == QCStatus.YELLOW
        assert classify_value(100, band) == QCStatus.YELLOW

    def test_warning_boundaries_are_inclusive(self) -> None:
        band = ThresholdBand(min=0, max=100, warning_margin=0.25)
        assert classify_value(25, band) == QCStatus.YELLOW
        assert classify_value(75, band) == QCStatus.YELLOW
        assert classify_value(25.5, band) == QCStatus.GREEN
        assert classify_value(74.5, band) == QCStatus.GREEN

    def test_zero_margin_only_edges_are_yellow(self) -> None:
        band = ThresholdBand(min=10, max=20, warning_margin=0.0)
        assert classify_value(10, band) == QCStatus.YELLOW
        assert classify_value(15, band) == QCStatus.GREEN
        assert classify_value(20, band) == QCStatus.YELLOW

    def test_margin_above_half_makes_whole_band_yellow(self) -> None:
        # low_warn = 60, high_warn = 40: the warning zones overlap
        band = ThresholdBand(min=0, max=100, warning_margin=0.6)
        for value in (0, 30, 50, 70, 100):
            assert classify_value(value, band) == QCStatus.YELLOW


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


class TestAggregateStatus:
    def test_red_wins(self) -> None:
        statuses = [
            ParameterStatus("a", 1.0, status=QCStatus.GREEN),
            ParameterStatus("b", 1.0, status=QCStatus.YELLOW),
            ParameterStatus("c", 1.0, status=QCStatus.RED),
        ]
        assert aggregate_status(statuses) == QCStatus.RED

    def test_yellow_without_red(self) -> None:
        statuses = [
            ParameterStatus("a", 1.0, status=QCStatus.GREEN),
            ParameterStatus("b", 1.0, status=QCStatus.YELLOW),
        ]
        assert aggregate_status(statuses) == QCStatus.YELLOW

    def test_unavailable_never_counts(self) -> None:
        statuses = [
            ParameterStatus("a", 1.0, status=QCStatus.GREEN),
            ParameterStatus("b", math.nan, available=False, status=QCStatus.RED),
        ]
        assert aggregate_status(statuses) == QCStatus.GREEN

    def test_all_unavailable_is_green(self) -> None:
        statuses = [ParameterStatus("a", math.nan, available=False)]
        assert aggregate_status(statuses) == QCStatus.GREEN

    def test_empty_is_green(self) -> None:
        assert aggregate_status([]) == QCStatus.GREEN


# ---------------------------------------------------------------------------
# Evaluate
# ---------------------------------------------------------------------------


class TestEvaluate:
    def test_all_normal_is_green(self, evaluator, normal_values) -> None:
        overall, statuses = evaluator.evaluate(make_reading(normal_values))
        assert overall == QCStatus.GREEN
        assert set(statuses) == set(normal_values)
        assert statuses["tdegasser"].min_ok == 0
        assert statuses["tdegasser"].max_ok == 150

    def test_nan_is_unavailable(self, evaluator, normal_values) -> None:
        values = {**normal_values, "tdegasser": math.nan}
        overall, statuses = evaluator.evaluate(make_reading(values))
        assert overall == QCStatus.GREEN
        assert statuses["tdegasser"].available is False
        assert statuses["tdegasser"].status is None
        assert statuses["tdegasser"].note == UNAVAILABLE_NOTE

    @pytest.mark.parametrize("value", [-999.25, -999.255, -999.245])
    def test_missing_sentinel_is_unavailable(self, evaluator, normal_values, value) -> None:
        values = {**normal_values, "qmud": value}
        overall, statuses = evaluator.evaluate(make_reading(values))
        assert overall == QCStatus.GREEN
        assert statuses["qmud"].available is False

    def test_value_near_but_outside_sentinel_tolerance_is_classified(self, evaluator, normal_values) -> None:
        values = {**normal_values, "qmud": -999.0}
        overall, statuses = evaluator.evaluate(make_reading(values))
        assert statuses["qmud"].available is True
        assert overall == QCStatus.RED

    def test_custom_missing_value(self, bands) -> None:
        evaluator = StatusEvaluator(ThresholdStore(bands), missing_value=-1.0)
        _, statuses = evaluator.evaluate(make_reading({"qmud": -1.0}))
        assert statuses["qmud"].available is False

    def test_unconfigured_parameter_is_green(self, evaluator, normal_values) -> None:
        values = {**normal_values, "unknown_sensor": 1e9}
        overall, statuses = evaluator.evaluate(make_reading(values))
        assert overall == QCStatus.GREEN
        assert statuses["unknown_sensor"].status == QCStatus.GREEN
        assert statuses["unknown_sensor"].min_ok is None
        assert statuses["unknown_sensor"].note == NO_THRESHOLD_NOTE

    def test_red_parameter_makes_overall_red(self, evaluator, normal_values) -> None:
        values = {**normal_values, "tdegasser": 170.0}
        overall, _ = evaluator.evaluate(make_reading(values))
        assert overall == QCStatus.RED
        assert [p.name for p in evaluator.get_out_of_range_parameters()] == ["tdegasser"]

    def test_unavailable_red_looking_value_is_ignored(self, evaluator) -> None:
        overall, _ = evaluator.evaluate(make_reading({"tdegasser": -999.25, "qmud": 200.0}))
        assert overall == QCStatus.GREEN
        assert evaluator.get_out_of_range_parameters() == []

    def test_state_replaced_each_call(self, evaluator, normal_values) -> None:
        evaluator.evaluate(make_reading({**normal_values, "extra": 1.0}))
        _, statuses = evaluator.evaluate(make_reading({"qmud": 200.0}))
        assert set(statuses) == {"qmud"}
        assert set(evaluator.get_parameter_statuses()) == {"qmud"}

    def test_returned_statuses_are_independent(self, evaluator, normal_values) -> None:
        _, statuses = evaluator.evaluate(make_reading(normal_values))
        statuses.clear()
        assert len(evaluator.get_parameter_statuses()) == len(normal_values)


# ---------------------------------------------------------------------------
# Incidents
# ---------------------------------------------------------------------------


class TestIncidents:
    def test_single_incident_for_sustained_red(self, evaluator, incident_sink, normal_values) -> None:
        red = {**normal_values, "tdegasser": 170.0}
        for second in range(5):
            evaluator.evaluate(make_reading(red, second))
        assert len(incident_sink) == 1

    def test_new_incident_after_leaving_red(self, evaluator, incident_sink, normal_values) -> None:
        red = {**normal_values, "tdegasser": 170.0}
        evaluator.evaluate(make_reading(red, 0))
        evaluator.evaluate(make_reading(red, 1))
        evaluator.evaluate(make_reading(normal_values, 2))
        evaluator.evaluate(make_reading(red, 3))
        assert len(incident_sink) == 2

    def test_yellow_to_red_logs_incident(self, evaluator, incident_sink, normal_values) -> None:
        evaluator.evaluate(make_reading({**normal_values, "tdegasser": 145.0}))
        assert evaluator.overall_status == QCStatus.YELLOW
        evaluator.evaluate(make_reading({**normal_values, "tdegasser": 170.0}))
        assert len(incident_sink) == 1

    def test_no_incident_without_red(self, evaluator, incident_sink, normal_values) -> None:
        evaluator.evaluate(make_reading(normal_values))
        evaluator.evaluate(make_reading({**normal_values, "tdegasser": 145.0}))
        assert len(incident_sink) == 0

    def test_incident_contents(self, evaluator, incident_sink, normal_values) -> None:
        values = {**normal_values, "tdegasser": 170.0, "qmud": -999.25}
        evaluator.evaluate(make_reading(values))

        record = incident_sink.incidents[0].to_dict()
        assert record["timestamp"].endswith("+00:00")
        assert record["raw_values"] == values
        assert record["parameters"]["tdegasser"] == {
            "value": 170.0,
            "available": True,
            "status": "RED",
            "min_ok": 0.0,
            "max_ok": 150.0,
            "note": "",
        }
        assert record["parameters"]["qmud"]["available"] is False
        assert record["parameters"]["qmud"]["status"] is None

    def test_sink_failure_does_not_break_evaluation(self, bands, normal_values) -> None:
        sink = _FailingSink()
        evaluator = StatusEvaluator(ThresholdStore(bands), sink)

        overall, _ = evaluator.evaluate(make_reading({**normal_values, "tdegasser": 170.0}))
        evaluator.evaluate(make_reading({**normal_values, "tdegasser": 170.0}, 1))

        assert overall == QCStatus.RED
        assert evaluator.overall_status == QCStatus.RED
        assert sink.attempts == 1

    def test_unexpected_sink_error_does_not_propagate(self, bands, normal_values) -> None:
        evaluator = StatusEvaluator(ThresholdStore(bands), _BrokenSink())

        overall, statuses = evaluator.evaluate(make_reading({**normal_values, "tdegasser": 170.0}))

        assert overall == QCStatus.RED
        assert statuses["tdegasser"].status == QCStatus.RED
        assert evaluator.overall_status == QCStatus.RED


# ---------------------------------------------------------------------------
# Threshold updates
# ---------------------------------------------------------------------------


class TestSetThresholds:
    def test_update_changes_classification(self, evaluator, normal_values) -> None:
        evaluator.set_thresholds({"qmud": ThresholdBand(min=300, max=400)})
        overall, statuses = evaluator.evaluate(make_reading(normal_values))
        assert overall == QCStatus.RED
        assert statuses["tdegasser"].note == NO_THRESHOLD_NOTE

    def test_update_applies_even_if_persistence_fails(self, normal_values) -> None:
        store = ThresholdStore(repository=_FailingRepository())
        evaluator = StatusEvaluator(store)

        persisted = evaluator.set_thresholds({"qmud": ThresholdBand(min=300, max=400)})

        assert persisted is False
        assert "qmud" in evaluator.get_thresholds()
        overall, _ = evaluator.evaluate(make_reading(normal_values))
        assert overall == QCStatus.RED

    def test_store_membership(self, bands) -> None:
        store = ThresholdStore(bands)
        assert "qmud" in store
        assert "pgasline" not in store
        store.set_thresholds({"pgasline": ThresholdBand(min=20, max=350)})
        assert "qmud" not in store
        assert "pgasline" in store

    def test_thresholds_accessor_returns_copy(self, evaluator) -> None:
        thresholds = evaluator.get_thresholds()
        thresholds.clear()
        assert len(evaluator.get_thresholds()) == 3
