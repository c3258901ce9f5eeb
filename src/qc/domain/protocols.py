"""Protocols (interfaces) for the collaborators of the decision core."""

from collections.abc import Iterator
from datetime import datetime
from typing import Protocol

from src.qc.domain.models import IncidentRecord, Reading, SystemStatus, ThresholdBand


class ThresholdRepository(Protocol):
    """Interface for loading and persisting threshold configuration."""

    def load(self) -> dict[str, ThresholdBand]:
        """Load the current threshold mapping (empty on any failure)."""
        ...

    def save(self, bands: dict[str, ThresholdBand]) -> None:
        """
        Persist a full threshold mapping.

        Raises:
            PersistenceError: If the write fails
        """
        ...


class IncidentSink(Protocol):
    """Interface for the append-only incident audit log."""

    def write_incident(self, record: IncidentRecord) -> None:
        """
        Append a single incident record.

        Raises:
            PersistenceError: If the append fails
        """
        ...


class ReadingSource(Protocol):
    """Interface for producers of timestamped parameter readings."""

    @property
    def is_connected(self) -> bool: ...

    def connect(self) -> bool:
        """Open the source. Returns False if no data could be loaded."""
        ...

    def disconnect(self) -> None: ...

    def readings(self) -> Iterator[Reading]:
        """Iterate over readings in delivery order."""
        ...

    def get_current_values(self) -> Reading: ...

    def get_historical_range(self, start: datetime, end: datetime) -> list[Reading]: ...


class StatusListener(Protocol):
    """Presentation collaborator receiving one snapshot per cycle."""

    def __call__(self, status: SystemStatus) -> None: ...
