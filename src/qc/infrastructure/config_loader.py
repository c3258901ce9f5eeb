"""Typed decoding of threshold and rule configuration documents."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, TypeVar

import yaml
from loguru import logger
from pydantic import BaseModel, ValidationError

from src.qc.domain.exceptions import ConfigurationParseError, PersistenceError
from src.qc.domain.models import Rule, ThresholdBand

T = TypeVar("T")


class ThresholdsDocument(BaseModel):
    """Top-level shape of thresholds.yaml."""

    parameters: dict[str, ThresholdBand] = {}


class RulesDocument(BaseModel):
    """Top-level shape of rules.yaml."""

    rules: list[Rule] = []


@dataclass
class LoadResult(Generic[T]):
    """Outcome of decoding a configuration document."""

    value: T
    error: ConfigurationParseError | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def _format_validation_errors(exc: ValidationError) -> list[str]:
    return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]


def _safe_load(text: str, source: str) -> dict:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationParseError(source, f"invalid YAML: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationParseError(source, f"expected a mapping at top level, got {type(data).__name__}")
    return data


def parse_thresholds(text: str, source: str = "thresholds") -> LoadResult[dict[str, ThresholdBand]]:
    """
    Decode a thresholds document.

    Returns:
        LoadResult with the band mapping, or an empty mapping and the parse error
    """
    try:
        data = _safe_load(text, source)
        document = ThresholdsDocument.model_validate(data)
    except ConfigurationParseError as e:
        logger.error(e.message)
        return LoadResult(value={}, error=e)
    except ValidationError as e:
        error = ConfigurationParseError(source, "schema validation failed", _format_validation_errors(e))
        logger.error(f"{error.message}: {error.errors}")
        return LoadResult(value={}, error=error)

    warnings = [
        f"{name}: min ({band.min}) is not below max ({band.max})"
        for name, band in document.parameters.items()
        if band.min >= band.max
    ]
    for warning in warnings:
        logger.warning(f"Suspicious threshold in {source}: {warning}")

    return LoadResult(value=dict(document.parameters), warnings=warnings)


def parse_rules(text: str, source: str = "rules") -> LoadResult[list[Rule]]:
    """
    Decode a rules document, preserving definition order.

    Returns:
        LoadResult with the rule list, or an empty list and the parse error
    """
    try:
        data = _safe_load(text, source)
        document = RulesDocument.model_validate(data)
    except ConfigurationParseError as e:
        logger.error(e.message)
        return LoadResult(value=[], error=e)
    except ValidationError as e:
        error = ConfigurationParseError(source, "schema validation failed", _format_validation_errors(e))
        logger.error(f"{error.message}: {error.errors}")
        return LoadResult(value=[], error=error)

    warnings = [f"{rule.id or rule.name}: rule has no conditions" for rule in document.rules if not rule.conditions]
    for warning in warnings:
        logger.warning(f"Rule in {source} can never match: {warning}")

    return LoadResult(value=list(document.rules), warnings=warnings)


def _read_text(path: Path) -> str:
    if not path.exists():
        raise ConfigurationParseError(str(path), "file not found")
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationParseError(str(path), f"cannot read file: {e}") from e


def load_thresholds(path: str | Path) -> LoadResult[dict[str, ThresholdBand]]:
    """Read and decode a thresholds file."""
    path = Path(path)
    try:
        text = _read_text(path)
    except ConfigurationParseError as e:
        logger.warning(f"Threshold file unavailable: {e.message}")
        return LoadResult(value={}, error=e)

    result = parse_thresholds(text, source=str(path))
    if result.ok:
        logger.info(f"Loaded {len(result.value)} thresholds from {path}")
    return result


def load_rules(path: str | Path) -> LoadResult[list[Rule]]:
    """Read and decode a rules file."""
    path = Path(path)
    try:
        text = _read_text(path)
    except ConfigurationParseError as e:
        logger.warning(f"Rules file unavailable: {e.message}")
        return LoadResult(value=[], error=e)

    result = parse_rules(text, source=str(path))
    if result.ok:
        logger.info(f"Loaded {len(result.value)} rules from {path}")
    return result


def load_rule_set(path: str | Path) -> list[Rule]:
    """Rules from ``path``, degraded to an empty list on any failure."""
    return load_rules(path).value


def load_threshold_set(path: str | Path) -> dict[str, ThresholdBand]:
    """Thresholds from ``path``, degraded to an empty mapping on any failure."""
    return load_thresholds(path).value


class YamlThresholdRepository:
    """Threshold repository backed by a thresholds.yaml file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> dict[str, ThresholdBand]:
        return load_threshold_set(self.path)

    def save(self, bands: dict[str, ThresholdBand]) -> None:
        """Write the full mapping, replacing the file contents."""
        document = {"parameters": {name: band.model_dump() for name, band in bands.items()}}

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            text = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
            self.path.write_text(text, encoding="utf-8")
        except (OSError, yaml.YAMLError) as e:
            raise PersistenceError(str(self.path), e) from e

        logger.info(f"Persisted {len(bands)} thresholds to {self.path}")
