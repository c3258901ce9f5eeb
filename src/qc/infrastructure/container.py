"""Dependency injection container for the QC decision core."""

from dependency_injector import containers, providers

from src.config import AppConfig
from src.qc.application.decision_engine import DecisionEngine
from src.qc.application.rule_matcher import RuleMatcher
from src.qc.application.status_evaluator import StatusEvaluator
from src.qc.application.threshold_store import ThresholdStore
from src.qc.application.trend_estimator import TrendEstimator
from src.qc.infrastructure.config_loader import YamlThresholdRepository, load_rule_set
from src.qc.infrastructure.history_buffer import HistoryBuffer
from src.qc.infrastructure.incident_sink import JsonlIncidentSink


class QCContainer(containers.DeclarativeContainer):
    """Dependency injection container for the decision core."""

    config = providers.Configuration()

    # Configuration collaborators
    threshold_repository = providers.Singleton(
        YamlThresholdRepository,
        path=config.paths.thresholds,
    )
    rules = providers.Singleton(
        load_rule_set,
        path=config.paths.rules,
    )

    # Audit log
    incident_sink = providers.Singleton(
        JsonlIncidentSink,
        path=config.paths.incident_log,
    )

    # Core
    threshold_store = providers.Singleton(
        ThresholdStore.from_repository,
        repository=threshold_repository,
    )
    history = providers.Singleton(
        HistoryBuffer,
        max_size=config.monitor.history_size,
    )
    trend_estimator = providers.Singleton(
        TrendEstimator,
        history=history,
        window=config.monitor.trend_window,
    )
    status_evaluator = providers.Singleton(
        StatusEvaluator,
        threshold_store=threshold_store,
        incident_sink=incident_sink,
        missing_value=config.monitor.missing_value,
    )
    rule_matcher = providers.Singleton(
        RuleMatcher,
        rules=rules,
        history=history,
        trend_estimator=trend_estimator,
    )
    decision_engine = providers.Singleton(
        DecisionEngine,
        status_evaluator=status_evaluator,
        rule_matcher=rule_matcher,
    )


def build_container(app_config: AppConfig | None = None) -> QCContainer:
    """Create a container wired from ``app_config``. Each call is independent."""
    app_config = app_config or AppConfig()

    container = QCContainer()
    container.config.from_dict(
        {
            "paths": {
                "thresholds": str(app_config.paths.thresholds_path),
                "rules": str(app_config.paths.rules_path),
                "incident_log": str(app_config.paths.incident_log_path),
            },
            "monitor": {
                "missing_value": app_config.monitor.missing_value,
                "history_size": app_config.monitor.history_size,
                "trend_window": app_config.monitor.trend_window,
            },
        }
    )
    return container


def create_decision_engine(app_config: AppConfig | None = None) -> DecisionEngine:
    """Convenience function to build a fully wired DecisionEngine."""
    return build_container(app_config).decision_engine()
