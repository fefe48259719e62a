from __future__ import annotations

import math
from collections.abc import Iterator, Sequence

from .models import WeightBand

# Baseline IWL rates (mL/kg/day) by birth weight, lightest band first.
# Upper bounds are inclusive; the last band is open-ended.
DEFAULT_BANDS: tuple[WeightBand, ...] = (
    WeightBand(min_grams=0, max_grams=749, baseline_rate=150.0, label="<750 g"),
    WeightBand(min_grams=750, max_grams=1000, baseline_rate=65.0, label="750-1000 g"),
    WeightBand(min_grams=1001, max_grams=1250, baseline_rate=55.0, label="1001-1250 g"),
    WeightBand(min_grams=1251, max_grams=1500, baseline_rate=35.0, label="1251-1500 g"),
    WeightBand(min_grams=1501, max_grams=2000, baseline_rate=25.0, label="1501-2000 g"),
    WeightBand(min_grams=2001, max_grams=None, baseline_rate=17.5, label=">2000 g"),
)


class BandNotFoundError(LookupError):
    """No band covers the weight. Bands are exhaustive, so this is a bug upstream."""


class BaselineTable:
    def __init__(self, bands: Sequence[WeightBand] = DEFAULT_BANDS) -> None:
        if not bands:
            raise ValueError("baseline table needs at least one band")
        if bands[0].min_grams != 0:
            raise ValueError("first band must start at 0 g")
        for lower, upper in zip(bands, bands[1:]):
            if lower.max_grams is None:
                raise ValueError(f"band {lower.label!r} is open-ended but not last")
            if upper.min_grams <= lower.max_grams or upper.min_grams - lower.max_grams > 1:
                raise ValueError(f"bands {lower.label!r} and {upper.label!r} are not contiguous")
        if bands[-1].max_grams is not None:
            raise ValueError("last band must be open-ended")
        self._bands = tuple(bands)

    def __iter__(self) -> Iterator[WeightBand]:
        return iter(self._bands)

    def __len__(self) -> int:
        return len(self._bands)

    def lookup(self, weight_grams: float) -> WeightBand:
        """Return the band for a weight.

        Weights falling between two integer edges (749.5 g) belong to the
        upper band, so every non-negative weight matches exactly once.
        """
        if math.isnan(weight_grams) or weight_grams < 0:
            raise BandNotFoundError(f"no baseline band for {weight_grams!r} g")
        for band in self._bands:
            if band.max_grams is None or weight_grams <= band.max_grams:
                return band
        raise BandNotFoundError(f"no baseline band for {weight_grams!r} g")
