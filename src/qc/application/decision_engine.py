"""Orchestration of one evaluation cycle."""

from loguru import logger

from src.qc.application.rule_matcher import RuleMatcher
from src.qc.application.status_evaluator import StatusEvaluator
from src.qc.domain.models import QCStatus, Reading, SystemStatus
from src.qc.infrastructure.logging import LoggingContext


class DecisionEngine:
    """
    Feeds each reading through status evaluation and, only when the overall
    status is RED, through rule-based diagnosis.

    Not reentrant: callers must serialize ``process_update`` calls.
    """

    def __init__(self, status_evaluator: StatusEvaluator, rule_matcher: RuleMatcher):
        self.status_evaluator = status_evaluator
        self.rule_matcher = rule_matcher

        logger.info("DecisionEngine initialized")

    def process_update(self, reading: Reading) -> SystemStatus:
        """Evaluate ``reading`` and assemble the status snapshot."""
        with LoggingContext(reading_time=reading.timestamp.isoformat()):
            current_qc, parameter_statuses = self.status_evaluator.evaluate(reading)

            recommendations = []
            if current_qc == QCStatus.RED:
                out_of_range = self.status_evaluator.get_out_of_range_parameters()
                recommendations = self.rule_matcher.diagnose(out_of_range, reading.values)

            logger.debug(f"Cycle complete: {current_qc} with {len(recommendations)} recommendations")

        return SystemStatus(
            timestamp=reading.timestamp,
            current_qc=current_qc,
            parameter_statuses=parameter_statuses,
            recommendations=tuple(recommendations),
        )
