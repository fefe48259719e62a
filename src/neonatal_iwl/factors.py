from __future__ import annotations

from collections.abc import Iterable, Iterator

from .models import EnvironmentalFactor

PHOTOTHERAPY_MAX_GRAMS = 2000


def _phototherapy_applies(weight_grams: float) -> bool:
    return weight_grams <= PHOTOTHERAPY_MAX_GRAMS


# Registration order is the order factors appear in the derivation trace.
DEFAULT_FACTORS: tuple[EnvironmentalFactor, ...] = (
    EnvironmentalFactor(
        id="radiantWarmer",
        label="Radiant warmer",
        kind="multiplicative",
        magnitude=1.75,
        description="Open radiant warmer increases evaporative loss.",
    ),
    EnvironmentalFactor(
        id="fever",
        label="Fever",
        kind="multiplicative",
        magnitude=1.40,
        description="Raised body temperature increases evaporative loss.",
    ),
    EnvironmentalFactor(
        id="humidifiedEnv",
        label="Humidified environment",
        kind="multiplicative",
        magnitude=0.75,
        description="Humidified incubator reduces transepidermal loss.",
    ),
    EnvironmentalFactor(
        id="phototherapy",
        label="Phototherapy",
        kind="additive",
        magnitude=15.0,
        description="Phototherapy adds a fixed loss in low birth weight infants.",
        applies_to=_phototherapy_applies,
        applicability=f"weight <= {PHOTOTHERAPY_MAX_GRAMS} g",
    ),
)


class FactorCatalog:
    def __init__(self, factors: Iterable[EnvironmentalFactor] = DEFAULT_FACTORS) -> None:
        self._factors = tuple(factors)
        self._by_id: dict[str, EnvironmentalFactor] = {}
        for factor in self._factors:
            if factor.id in self._by_id:
                raise ValueError(f"duplicate factor id: {factor.id!r}")
            self._by_id[factor.id] = factor

    def all(self) -> tuple[EnvironmentalFactor, ...]:
        return self._factors

    def ids(self) -> tuple[str, ...]:
        return tuple(factor.id for factor in self._factors)

    def get(self, factor_id: str) -> EnvironmentalFactor:
        try:
            return self._by_id[factor_id]
        except KeyError:
            raise KeyError(f"unknown factor id: {factor_id!r}") from None

    def __contains__(self, factor_id: object) -> bool:
        return factor_id in self._by_id

    def __iter__(self) -> Iterator[EnvironmentalFactor]:
        return iter(self._factors)

    def __len__(self) -> int:
        return len(self._factors)
