"""Incident sinks for the append-only audit log of RED transitions."""

import json
from pathlib import Path
from typing import Any

import pandas as pd
from loguru import logger

from src.qc.domain.exceptions import PersistenceError
from src.qc.domain.models import IncidentRecord
from src.qc.domain.protocols import IncidentSink


def _flatten(record: dict[str, Any]) -> dict[str, Any]:
    """One row per incident: timestamp, red parameters and raw values."""
    parameters = record.get("parameters", {})
    row = {
        "timestamp": pd.to_datetime(record.get("timestamp"), utc=True),
        "red_parameters": ",".join(
            name for name, p in parameters.items() if p.get("available") and p.get("status") == "RED"
        ),
    }
    row.update(record.get("raw_values", {}))
    return row


class InMemoryIncidentSink(IncidentSink):
    """Simple in-memory incident storage for testing and embedding."""

    def __init__(self):
        self.incidents: list[IncidentRecord] = []

    def write_incident(self, record: IncidentRecord) -> None:
        self.incidents.append(record)

    def to_dataframe(self) -> pd.DataFrame:
        if not self.incidents:
            return pd.DataFrame()

        return pd.DataFrame([_flatten(record.to_dict()) for record in self.incidents])

    def clear(self):
        self.incidents.clear()

    def __len__(self):
        return len(self.incidents)


class JsonlIncidentSink(IncidentSink):
    """Incident sink that appends one JSON document per line."""

    def __init__(self, path: str | Path):
        """
        Initialize JSONL sink, creating the log file if needed.

        Args:
            path: Path to the incidents.jsonl file
        """
        self.path = Path(path)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(exist_ok=True)
        except OSError as e:
            # Appends will fail and be reported individually
            logger.error(f"Cannot create incident log {self.path}: {e}")

        logger.info(f"Incident log at {self.path}")

    def write_incident(self, record: IncidentRecord) -> None:
        """Append a record as a single JSON line."""
        line = json.dumps(record.to_dict(), ensure_ascii=False)

        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise PersistenceError(str(self.path), e) from e

        logger.info(f"Incident recorded to {self.path}")

    def read_incidents(self) -> list[dict[str, Any]]:
        """Read every record back; malformed lines are skipped."""
        if not self.path.exists():
            return []

        incidents = []
        with open(self.path, encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    incidents.append(json.loads(line))
                except json.JSONDecodeError as e:
                    logger.warning(f"Skipping malformed incident at {self.path}:{line_number}: {e}")

        return incidents

    def to_dataframe(self) -> pd.DataFrame:
        incidents = self.read_incidents()
        if not incidents:
            return pd.DataFrame()

        return pd.DataFrame([_flatten(record) for record in incidents])

    def __len__(self):
        return len(self.read_incidents())
