"""CSV replay source producing timestamped readings."""

from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pandas as pd
from loguru import logger

from src.config import DataSourceConfig, TimestampConfig
from src.qc.domain.models import Reading
from src.qc.domain.protocols import ReadingSource

SECONDS_EPOCH = datetime(2024, 1, 1)


class CsvReadingSource(ReadingSource):
    """
    Loads a CSV export once and serves it as a sequence of readings.

    Enabled parameters are mapped from their ``source_column``; cells that
    cannot be parsed become the missing-value sentinel and rows without a
    valid timestamp are dropped.
    """

    def __init__(
        self,
        path: str | Path,
        data_source: DataSourceConfig | None = None,
        timestamp: TimestampConfig | None = None,
        missing_value: float = -999.25,
    ):
        self.path = Path(path)
        self.data_source = data_source or DataSourceConfig()
        self.timestamp = timestamp or TimestampConfig()
        self.missing_value = missing_value

        self._readings: list[Reading] = []
        self._current_index = 0
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> bool:
        """Load the file. Returns False if nothing usable was found."""
        logger.info(f"Loading file: {self.path}")

        if not self.path.exists():
            logger.error(f"File not found: {self.path}")
            return False

        try:
            df = pd.read_csv(self.path, skipinitialspace=True)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {self.path}: {e}")
            return False

        self._readings = self._to_readings(df)

        if not self._readings:
            logger.warning("No data loaded from file")
            return False

        self._current_index = 0
        self._connected = True
        logger.info(
            f"Loaded {len(self._readings)} records "
            f"({self._readings[0].timestamp} to {self._readings[-1].timestamp})"
        )
        return True

    def _parse_timestamps(self, column: pd.Series) -> pd.Series:
        if self.timestamp.format == "seconds":
            offsets = pd.to_numeric(column, errors="coerce")
            unit = "ms" if self.timestamp.unit == "ms" else "s"
            return pd.Timestamp(SECONDS_EPOCH) + pd.to_timedelta(offsets, unit=unit)

        return pd.to_datetime(column, errors="coerce")

    def _to_readings(self, df: pd.DataFrame) -> list[Reading]:
        df.columns = [str(c).strip() for c in df.columns]

        ts_column = self.timestamp.source_column
        if ts_column not in df.columns:
            logger.error(f"Timestamp column '{ts_column}' not found")
            return []

        columns = {}
        for name, param in self.data_source.parameters.items():
            if not param.enabled:
                continue
            if param.source_column in df.columns:
                columns[name] = param.source_column
            else:
                logger.warning(f"Column '{param.source_column}' for parameter {name} not found")

        values = pd.DataFrame(
            {name: pd.to_numeric(df[column], errors="coerce") for name, column in columns.items()},
            index=df.index,
        ).fillna(self.missing_value)
        timestamps = self._parse_timestamps(df[ts_column])

        valid = timestamps.notna()
        dropped = int((~valid).sum())
        if dropped:
            logger.warning(f"Dropped {dropped} rows with unparsable timestamps")

        records = values[valid].to_dict("records")
        return [
            Reading(timestamp=pd.Timestamp(ts).to_pydatetime(), values=row)
            for ts, row in zip(timestamps[valid], records)
        ]

    def readings(self) -> Iterator[Reading]:
        if not self._connected:
            raise RuntimeError("Not connected to data source")
        yield from self._readings

    def get_current_values(self) -> Reading:
        """Current reading, advancing and wrapping around at the end."""
        if not self._connected or not self._readings:
            raise RuntimeError("Not connected to data source")

        if self._current_index >= len(self._readings):
            self._current_index = 0

        reading = self._readings[self._current_index]
        self._current_index += 1
        return reading

    def get_historical_range(self, start: datetime, end: datetime) -> list[Reading]:
        if not self._connected:
            raise RuntimeError("Not connected to data source")

        return [r for r in self._readings if start <= r.timestamp <= end]

    def disconnect(self) -> None:
        logger.info("Disconnecting file source")
        self._connected = False
        self._readings = []
        self._current_index = 0

    def __len__(self):
        return len(self._readings)
