"""Threshold-based classification of readings with incident edge detection."""

import math
from datetime import datetime, timezone

from loguru import logger

from src.qc.application.threshold_store import ThresholdStore
from src.qc.domain.exceptions import PersistenceError
from src.qc.domain.models import (
    NO_THRESHOLD_NOTE,
    UNAVAILABLE_NOTE,
    IncidentRecord,
    ParameterStatus,
    QCStatus,
    Reading,
    ThresholdBand,
)
from src.qc.domain.protocols import IncidentSink

DEFAULT_MISSING_VALUE = -999.25
MISSING_VALUE_TOLERANCE = 0.01


def classify_value(value: float, band: ThresholdBand) -> QCStatus:
    """
    Classify an available value against a band.

    Outside [min, max] is RED. The warning zone is ``warning_margin`` times
    the full band width measured inward from each edge; values on or beyond
    either warning edge are YELLOW.
    """
    if value < band.min or value > band.max:
        return QCStatus.RED

    band_range = band.max - band.min
    low_warn = band.min + band.warning_margin * band_range
    high_warn = band.max - band.warning_margin * band_range

    if value <= low_warn or value >= high_warn:
        return QCStatus.YELLOW
    return QCStatus.GREEN


def aggregate_status(statuses: list[ParameterStatus]) -> QCStatus:
    """Worst status across available parameters; GREEN if none are available."""
    any_yellow = False

    for status in statuses:
        if not status.available:
            continue
        if status.status == QCStatus.RED:
            return QCStatus.RED
        if status.status == QCStatus.YELLOW:
            any_yellow = True

    return QCStatus.YELLOW if any_yellow else QCStatus.GREEN


class StatusEvaluator:
    """
    Classifies each reading against the threshold store and aggregates an
    overall status.

    Every call to :meth:`evaluate` replaces the per-parameter state. An
    incident is emitted only on the edge into RED.
    """

    def __init__(
        self,
        threshold_store: ThresholdStore,
        incident_sink: IncidentSink | None = None,
        missing_value: float = DEFAULT_MISSING_VALUE,
    ):
        self.threshold_store = threshold_store
        self.incident_sink = incident_sink
        self.missing_value = missing_value

        self._parameter_status: dict[str, ParameterStatus] = {}
        self._overall_status = QCStatus.GREEN

        logger.info(f"StatusEvaluator initialized with {len(threshold_store)} thresholds")

    @property
    def overall_status(self) -> QCStatus:
        return self._overall_status

    def is_unavailable(self, value: float | None) -> bool:
        return value is None or math.isnan(value) or abs(value - self.missing_value) < MISSING_VALUE_TOLERANCE

    def classify(self, name: str, value: float | None) -> ParameterStatus:
        """Build the status of a single parameter."""
        if self.is_unavailable(value):
            return ParameterStatus(
                name=name,
                value=math.nan if value is None else value,
                available=False,
                status=None,
                note=UNAVAILABLE_NOTE,
            )

        band = self.threshold_store.get(name)
        if band is None:
            return ParameterStatus(name=name, value=value, status=QCStatus.GREEN, note=NO_THRESHOLD_NOTE)

        return ParameterStatus(
            name=name,
            value=value,
            status=classify_value(value, band),
            min_ok=band.min,
            max_ok=band.max,
        )

    def evaluate(self, reading: Reading) -> tuple[QCStatus, dict[str, ParameterStatus]]:
        """
        Classify every parameter of ``reading`` and update the overall status.

        Returns:
            Tuple of (overall status, snapshot of per-parameter statuses)
        """
        self._parameter_status = {name: self.classify(name, value) for name, value in reading.values.items()}

        new_status = aggregate_status(list(self._parameter_status.values()))

        if new_status == QCStatus.RED and self._overall_status != QCStatus.RED:
            self._log_incident(reading)

        if new_status != self._overall_status:
            logger.info(f"Overall status {self._overall_status} -> {new_status}")

        self._overall_status = new_status
        return new_status, self.get_parameter_statuses()

    def _log_incident(self, reading: Reading) -> None:
        red = [name for name, p in self._parameter_status.items() if p.available and p.status == QCStatus.RED]
        logger.warning(f"Transition to RED, out of range: {', '.join(red)}")

        if self.incident_sink is None:
            return

        record = IncidentRecord(
            timestamp=datetime.now(timezone.utc),
            raw_values=dict(reading.values),
            parameters=self.get_parameter_statuses(),
        )

        try:
            self.incident_sink.write_incident(record)
        except PersistenceError as e:
            logger.error(f"Failed to log incident: {e.message} {e.details}")
        except Exception:
            logger.exception("Incident sink failed, evaluation continues")

    def set_thresholds(self, new_bands: dict[str, ThresholdBand]) -> bool:
        """Replace the threshold bands; see :meth:`ThresholdStore.set_thresholds`."""
        return self.threshold_store.set_thresholds(new_bands)

    def get_thresholds(self) -> dict[str, ThresholdBand]:
        return self.threshold_store.get_thresholds()

    def get_parameter_statuses(self) -> dict[str, ParameterStatus]:
        return dict(self._parameter_status)

    def get_out_of_range_parameters(self) -> list[ParameterStatus]:
        return [p for p in self._parameter_status.values() if p.available and p.status == QCStatus.RED]
