"""Infrastructure layer for the QC decision core."""

from src.qc.infrastructure.config_loader import (
    LoadResult,
    YamlThresholdRepository,
    load_rule_set,
    load_rules,
    load_threshold_set,
    load_thresholds,
    parse_rules,
    parse_thresholds,
)
from src.qc.infrastructure.csv_source import CsvReadingSource
from src.qc.infrastructure.history_buffer import HistoryBuffer
from src.qc.infrastructure.incident_sink import InMemoryIncidentSink, JsonlIncidentSink

__all__ = [
    "LoadResult",
    "YamlThresholdRepository",
    "load_rule_set",
    "load_rules",
    "load_threshold_set",
    "load_thresholds",
    "parse_rules",
    "parse_thresholds",
    "CsvReadingSource",
    "HistoryBuffer",
    "InMemoryIncidentSink",
    "JsonlIncidentSink",
]
