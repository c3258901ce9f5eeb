"""Rule-based diagnosis of RED states."""

from collections.abc import Iterable, Mapping

from loguru import logger

from src.qc.application.trend_estimator import TrendEstimator
from src.qc.domain.models import ParameterStatus, Recommendation, Rule, Trend
from src.qc.infrastructure.history_buffer import HistoryBuffer


class RuleMatcher:
    """
    Matches diagnostic rules against out-of-range parameters and trends.

    Rules are evaluated in definition order. Conditions are AND-ed and the
    first failing condition rejects the rule.
    """

    def __init__(
        self,
        rules: Iterable[Rule],
        history: HistoryBuffer | None = None,
        trend_estimator: TrendEstimator | None = None,
    ):
        self._rules: tuple[Rule, ...] = tuple(rules)
        self.history = history if history is not None else HistoryBuffer()
        self.trend_estimator = trend_estimator if trend_estimator is not None else TrendEstimator(self.history)

        logger.info(f"RuleMatcher initialized with {len(self._rules)} rules")

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def update_history(self, values: Mapping[str, float]) -> None:
        self.history.update(values)

    def check_rule(self, rule: Rule, out_of_range: set[str]) -> list[str] | None:
        """
        Evaluate one rule.

        Returns:
            Descriptions of the satisfied conditions, or None if the rule fails
        """
        matching_conditions = []

        for condition in rule.conditions:
            name = condition.parameter

            if condition.threshold_breach and name not in out_of_range:
                return None

            if condition.trend != Trend.ANY:
                actual = self.trend_estimator.trend(name)
                if actual != condition.trend:
                    return None
                matching_conditions.append(f"{name} is {actual.value}")
            else:
                matching_conditions.append(f"{name} is out of range")

        # Rules without conditions never match
        return matching_conditions or None

    def diagnose(
        self,
        out_of_range_parameters: Iterable[ParameterStatus | str],
        current_values: Mapping[str, float],
    ) -> list[Recommendation]:
        """
        Produce recommendations ranked by confidence.

        Equal confidences keep rule-definition order.
        """
        self.update_history(current_values)

        out_of_range = {p if isinstance(p, str) else p.name for p in out_of_range_parameters}
        recommendations = []

        for rule in self._rules:
            matching_conditions = self.check_rule(rule, out_of_range)
            if not matching_conditions:
                continue

            recommendations.append(
                Recommendation(
                    rule_id=rule.id,
                    rule_name=rule.name,
                    problem_category=rule.problem_category,
                    problem_description=rule.problem_description,
                    solutions=tuple(sorted(rule.solutions, key=lambda s: s.priority)),
                    confidence=rule.base_confidence,
                    matching_conditions=tuple(matching_conditions),
                )
            )
            logger.info(f"Rule matched: {rule.name} (confidence: {rule.base_confidence:.0%})")

        # sorted() is stable, ties keep definition order
        recommendations = sorted(recommendations, key=lambda r: r.confidence, reverse=True)

        if not recommendations:
            logger.info("No rules matched current conditions")

        return recommendations
