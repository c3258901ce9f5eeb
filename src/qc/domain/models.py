"""Domain models for the gas-extraction QC decision core."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator


class QCStatus(StrEnum):
    """Three-level severity for a parameter or the whole system."""

    GREEN = "GREEN"  # Within safe range
    YELLOW = "YELLOW"  # Inside the warning margin
    RED = "RED"  # Out of range


class Trend(StrEnum):
    """Qualitative direction of a parameter over its recent history."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    ANY = "any"  # Only meaningful as a rule requirement


UNAVAILABLE_NOTE = "N/A - No data / communication error"
NO_THRESHOLD_NOTE = "No threshold configured"


@dataclass(frozen=True)
class Reading:
    """A single set of parameter readings at a point in time."""

    timestamp: datetime
    values: dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        # Own a private copy so the producer cannot mutate it after creation
        object.__setattr__(self, "values", dict(self.values))

    def get_value(self, parameter_name: str, default: float = math.nan) -> float:
        return self.values.get(parameter_name, default)


class ThresholdBand(BaseModel):
    """Safety band for one parameter."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    display_name: str = Field(default="", description="Human-readable parameter name")
    min: float = Field(default=0.0, description="Lowest safe value")
    max: float = Field(default=100.0, description="Highest safe value")
    unit: str = Field(default="", description="Engineering unit")
    warning_margin: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Fraction of the band width treated as warning zone at each edge"
    )


class RuleCondition(BaseModel):
    """One AND-ed requirement of a diagnostic rule."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    parameter: str = Field(..., description="Internal parameter name")
    trend: Trend = Field(default=Trend.ANY, description="Required trend, or 'any'")
    threshold_breach: bool = Field(default=False, description="Whether the parameter must be out of range")

    @field_validator("trend", mode="before")
    @classmethod
    def normalize_trend(cls, v: Any) -> Any:
        """Accept any casing; unknown trends fall back to 'any'."""
        if v is None:
            return Trend.ANY
        if isinstance(v, str):
            value = v.strip().lower()
            if value not in {t.value for t in Trend}:
                logger.warning(f"Unknown trend '{v}' in rule condition, treating as 'any'")
                return Trend.ANY
            return value
        return v


class Solution(BaseModel):
    """Remediation step attached to a rule."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    action: str = ""
    priority: int = Field(default=0, description="Lower value means higher priority")
    estimated_time_minutes: int = 0


class Rule(BaseModel):
    """Diagnostic rule matched against out-of-range parameters and trends."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    name: str = ""
    description: str = ""
    conditions: tuple[RuleCondition, ...] = ()
    problem_category: str = ""
    problem_description: str = ""
    solutions: tuple[Solution, ...] = ()
    base_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    # Parsed and carried, but not used for ranking
    historical_success_rate: float = Field(default=0.0, ge=0.0, le=1.0)


@dataclass(frozen=True)
class ParameterStatus:
    """Classification of one parameter for the current cycle."""

    name: str
    value: float
    available: bool = True
    status: QCStatus | None = None
    min_ok: float | None = None
    max_ok: float | None = None
    note: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to the audit record shape."""
        return {
            "value": _json_float(self.value),
            "available": self.available,
            "status": self.status.value if self.status is not None else None,
            "min_ok": self.min_ok,
            "max_ok": self.max_ok,
            "note": self.note,
        }


@dataclass(frozen=True)
class Recommendation:
    """Ranked, rule-derived diagnosis."""

    rule_id: str
    rule_name: str
    problem_category: str
    problem_description: str
    solutions: tuple[Solution, ...] = ()
    confidence: float = 0.0
    matching_conditions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "problem_category": self.problem_category,
            "problem_description": self.problem_description,
            "solutions": [s.model_dump() for s in self.solutions],
            "confidence": self.confidence,
            "matching_conditions": list(self.matching_conditions),
        }


@dataclass(frozen=True)
class SystemStatus:
    """Snapshot produced by one evaluation cycle."""

    timestamp: datetime
    current_qc: QCStatus
    parameter_statuses: dict[str, ParameterStatus] = field(default_factory=dict)
    recommendations: tuple[Recommendation, ...] = ()

    def red_parameters(self) -> list[str]:
        return [
            name for name, p in self.parameter_statuses.items() if p.available and p.status == QCStatus.RED
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for presentation collaborators."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "current_qc": self.current_qc.value,
            "parameters": {name: p.to_dict() for name, p in self.parameter_statuses.items()},
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class IncidentRecord:
    """Append-only audit record of a transition into RED."""

    timestamp: datetime
    raw_values: dict[str, float]
    parameters: dict[str, ParameterStatus]

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "raw_values": {k: _json_float(v) for k, v in self.raw_values.items()},
            "parameters": {name: p.to_dict() for name, p in self.parameters.items()},
        }


def _json_float(value: float | None) -> float | None:
    """NaN and infinities are not valid JSON; map them to null."""
    if value is None or not math.isfinite(value):
        return None
    return value
