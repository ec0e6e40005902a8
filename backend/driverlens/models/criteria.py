from __future__ import annotations

from dataclasses import dataclass, fields
import math

from driverlens.core.errors import ConfigurationError
from driverlens.models.enums import SelectionProfile


WEIGHT_SUM_TOLERANCE = 1e-9


def _check_unit_interval(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number.")
    if value < 0 or value > 1:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value}.")


@dataclass(frozen=True)
class ScoringConfig:
    materiality: float = 0.3
    variability: float = 0.2
    predictability: float = 0.2
    growth_impact: float = 0.2
    data_quality: float = 0.1

    def __post_init__(self) -> None:
        for item in fields(self):
            _check_unit_interval(f"{item.name} weight", getattr(self, item.name))
        total = self.materiality + self.variability + self.predictability + self.growth_impact + self.data_quality
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ConfigurationError(f"Scoring weights must sum to 1.0, got {total:.12f}.")


@dataclass(frozen=True)
class SelectionCriteria:
    minimum_score: float
    minimum_materiality: float
    minimum_data_quality: float
    correlation_threshold: float = 0.8
    primary_driver_count: int = 5

    def __post_init__(self) -> None:
        _check_unit_interval("minimum_score", self.minimum_score)
        _check_unit_interval("minimum_materiality", self.minimum_materiality)
        _check_unit_interval("minimum_data_quality", self.minimum_data_quality)
        _check_unit_interval("correlation_threshold", self.correlation_threshold)
        if not isinstance(self.primary_driver_count, int) or self.primary_driver_count < 1:
            raise ConfigurationError("primary_driver_count must be an integer >= 1.")

    @classmethod
    def production(cls) -> SelectionCriteria:
        return cls(minimum_score=0.4, minimum_materiality=0.01, minimum_data_quality=0.5)

    @classmethod
    def demo(cls) -> SelectionCriteria:
        # Sandbox companies carry sparse, short histories.
        return cls(minimum_score=0.2, minimum_materiality=0.005, minimum_data_quality=0.05)

    @classmethod
    def preset(cls, name: SelectionProfile | str) -> SelectionCriteria:
        try:
            profile = SelectionProfile(name)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown selection profile '{name}'.") from exc
        if profile == SelectionProfile.production:
            return cls.production()
        return cls.demo()
