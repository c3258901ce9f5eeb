import pytest

from src.qc.application.decision_engine import DecisionEngine
from src.qc.application.rule_matcher import RuleMatcher
from src.qc.application.status_evaluator import StatusEvaluator
from src.qc.application.threshold_store import ThresholdStore
from src.qc.domain.models import Rule, ThresholdBand
from src.qc.infrastructure.history_buffer import HistoryBuffer
from src.qc.infrastructure.incident_sink import InMemoryIncidentSink
from tests.helpers.factories import make_rule


@pytest.fixture
def bands() -> dict[str, ThresholdBand]:
    return {
        "tdegasser": ThresholdBand(display_name="T Degasser", min=0, max=150, unit="degC", warning_margin=0.1),
        "qmud": ThresholdBand(display_name="Q Mud", min=50, max=350, unit="cm3/min", warning_margin=0.1),
        "ppump": ThresholdBand(display_name="P Pump", min=0, max=100, unit="mbar", warning_margin=0.25),
    }


@pytest.fixture
def normal_values() -> dict[str, float]:
    return {"tdegasser": 75.0, "qmud": 200.0, "ppump": 50.0}


@pytest.fixture
def incident_sink() -> InMemoryIncidentSink:
    return InMemoryIncidentSink()


@pytest.fixture
def evaluator(bands, incident_sink) -> StatusEvaluator:
    return StatusEvaluator(ThresholdStore(bands), incident_sink)


@pytest.fixture
def history() -> HistoryBuffer:
    return HistoryBuffer()


@pytest.fixture
def mud_flow_rule() -> Rule:
    return make_rule(
        "R001",
        [{"parameter": "qmud", "trend": "decreasing", "threshold_breach": True}],
        confidence=0.85,
        name="Mud flow loss",
        solutions=[
            {"id": "S2", "action": "Verify pump", "priority": 2, "estimated_time_minutes": 5},
            {"id": "S1", "action": "Check suction", "priority": 1, "estimated_time_minutes": 10},
        ],
    )


@pytest.fixture
def engine(evaluator, history, mud_flow_rule) -> DecisionEngine:
    return DecisionEngine(evaluator, RuleMatcher([mud_flow_rule], history=history))
