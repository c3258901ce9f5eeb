"""Gas-extraction QC decision core package."""

from src.qc.application import DecisionEngine, MonitoringLoop, RuleMatcher, StatusEvaluator, ThresholdStore
from src.qc.domain import QCStatus, Reading, SystemStatus, Trend
from src.qc.infrastructure.container import build_container, create_decision_engine

__all__ = [
    "DecisionEngine",
    "MonitoringLoop",
    "RuleMatcher",
    "StatusEvaluator",
    "ThresholdStore",
    "QCStatus",
    "Reading",
    "SystemStatus",
    "Trend",
    "build_container",
    "create_decision_engine",
]
