"""Domain layer for the QC decision core."""

from src.qc.domain.exceptions import ConfigurationParseError, PersistenceError, QCException
from src.qc.domain.models import (
    IncidentRecord,
    ParameterStatus,
    QCStatus,
    Reading,
    Recommendation,
    Rule,
    RuleCondition,
    Solution,
    SystemStatus,
    ThresholdBand,
    Trend,
)
from src.qc.domain.protocols import IncidentSink, ReadingSource, StatusListener, ThresholdRepository

__all__ = [
    "ConfigurationParseError",
    "PersistenceError",
    "QCException",
    "IncidentRecord",
    "ParameterStatus",
    "QCStatus",
    "Reading",
    "Recommendation",
    "Rule",
    "RuleCondition",
    "Solution",
    "SystemStatus",
    "ThresholdBand",
    "Trend",
    "IncidentSink",
    "ReadingSource",
    "StatusListener",
    "ThresholdRepository",
]
