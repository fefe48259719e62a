from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

FactorKind = Literal["multiplicative", "additive"]
WeightErrorKind = Literal["not_a_number", "non_positive", "too_high", "too_low"]


@dataclass(frozen=True)
class WeightBand:
    """Birth-weight band with its unadjusted IWL rate (mL/kg/day)."""

    min_grams: float
    max_grams: float | None
    baseline_rate: float
    label: str


def _always(weight_grams: float) -> bool:
    return True


@dataclass(frozen=True)
class EnvironmentalFactor:
    id: str
    label: str
    kind: FactorKind
    magnitude: float
    description: str = ""
    applies_to: Callable[[float], bool] = field(default=_always, compare=False)
    applicability: str = "always"

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("factor id must not be empty")
        if self.kind not in ("multiplicative", "additive"):
            raise ValueError("kind must be one of: multiplicative, additive")
        if self.kind == "multiplicative" and self.magnitude <= 0:
            raise ValueError(f"multiplicative factor {self.id!r} needs a magnitude greater than 0")


@dataclass(frozen=True)
class CalculationResult:
    weight_grams: float
    band: WeightBand
    baseline_rate: float
    applied_multiplier: float
    per_kg_per_day_rate: float
    total_ml_per_day: float
    trace: tuple[str, ...]
    applied_factor_ids: tuple[str, ...] = ()
    skipped_factor_ids: tuple[str, ...] = ()

    @property
    def trace_text(self) -> str:
        return "\n".join(self.trace)


class InvalidWeightError(ValueError):
    """Raised when raw weight text is not a plausible neonatal weight."""

    def __init__(self, kind: WeightErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
