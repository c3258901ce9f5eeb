"""Application layer for the QC decision core."""

from src.qc.application.decision_engine import DecisionEngine
from src.qc.application.monitoring_loop import MonitoringLoop, evaluate_dataframe
from src.qc.application.rule_matcher import RuleMatcher
from src.qc.application.status_evaluator import StatusEvaluator, aggregate_status, classify_value
from src.qc.application.threshold_store import ThresholdStore
from src.qc.application.trend_estimator import TrendEstimator, classify_trend

__all__ = [
    "DecisionEngine",
    "MonitoringLoop",
    "evaluate_dataframe",
    "RuleMatcher",
    "StatusEvaluator",
    "aggregate_status",
    "classify_value",
    "ThresholdStore",
    "TrendEstimator",
    "classify_trend",
]
