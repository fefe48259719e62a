from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal

from .baseline import BaselineTable
from .factors import FactorCatalog
from .models import CalculationResult, EnvironmentalFactor

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def round2(value: float) -> float:
    """Round half-up to 2 decimals on the shortest decimal form of ``value``."""
    return float(Decimal(repr(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def format_number(value: float, places: int = 2) -> str:
    text = f"{value:.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _percent_change(magnitude: float) -> str:
    change = (magnitude - 1.0) * 100.0
    sign = "+" if change >= 0 else "-"
    return f"{sign}{format_number(abs(change))}%"


def _not_applied(factor: EnvironmentalFactor, weight_grams: float) -> str:
    return (
        f"{factor.label}: not applied, requires {factor.applicability} "
        f"(weight {format_number(weight_grams)} g)"
    )


class CalculationEngine:
    """Derives the IWL rate for a validated weight and a factor selection.

    Multiplicative factors are folded into one multiplier before any additive
    factor is added, and the per-kg rate is rounded before the daily total is
    derived from it. Both orderings change the clinical number if swapped.
    """

    def __init__(self, table: BaselineTable | None = None, catalog: FactorCatalog | None = None) -> None:
        self.table = table if table is not None else BaselineTable()
        self.catalog = catalog if catalog is not None else FactorCatalog()

    def compute(self, weight_grams: float, selection: Mapping[str, bool]) -> CalculationResult:
        band = self.table.lookup(weight_grams)
        baseline = band.baseline_rate
        trace = [f"Baseline IWL for {format_number(weight_grams)} g ({band.label}): {format_number(baseline)} mL/kg/day"]
        applied: list[str] = []
        skipped: list[str] = []

        active = [factor for factor in self.catalog.all() if selection.get(factor.id, False)]

        multiplier = 1.0
        for factor in active:
            if factor.kind != "multiplicative":
                continue
            if not factor.applies_to(weight_grams):
                skipped.append(factor.id)
                trace.append(_not_applied(factor, weight_grams))
                continue
            multiplier *= factor.magnitude
            applied.append(factor.id)
            trace.append(f"{factor.label}: {_percent_change(factor.magnitude)} (x{format_number(factor.magnitude)})")

        adjusted = baseline * multiplier
        if applied:
            trace.append(
                f"Combined multiplier: x{format_number(multiplier, 4)} -> "
                f"{format_number(baseline)} x {format_number(multiplier, 4)} = {format_number(adjusted)} mL/kg/day"
            )
        else:
            trace.append("Combined multiplier: x1 (no multiplicative factors active)")

        for factor in active:
            if factor.kind != "additive":
                continue
            if not factor.applies_to(weight_grams):
                skipped.append(factor.id)
                trace.append(_not_applied(factor, weight_grams))
                continue
            adjusted += factor.magnitude
            applied.append(factor.id)
            sign = "+" if factor.magnitude >= 0 else "-"
            trace.append(
                f"{factor.label}: {sign}{format_number(abs(factor.magnitude))} mL/kg/day -> "
                f"{format_number(adjusted)} mL/kg/day"
            )

        per_kg = round2(adjusted)
        weight_kg = weight_grams / 1000
        total = round2(per_kg * weight_grams / 1000)
        trace.append(f"IWL rate: {per_kg:.2f} mL/kg/day")
        trace.append(f"Total IWL: {per_kg:.2f} mL/kg/day x {format_number(weight_kg, 4)} kg = {total:.2f} mL/day")

        logger.debug(
            "computed IWL weight=%s band=%s multiplier=%s rate=%s total=%s",
            weight_grams,
            band.label,
            multiplier,
            per_kg,
            total,
        )
        return CalculationResult(
            weight_grams=weight_grams,
            band=band,
            baseline_rate=baseline,
            applied_multiplier=multiplier,
            per_kg_per_day_rate=per_kg,
            total_ml_per_day=total,
            trace=tuple(trace),
            applied_factor_ids=tuple(applied),
            skipped_factor_ids=tuple(skipped),
        )
