from __future__ import annotations

import math
import re

from .models import InvalidWeightError

MIN_WEIGHT_GRAMS = 200.0
MAX_WEIGHT_GRAMS = 10000.0

_NON_NUMERIC = re.compile(r"[^0-9.]")


def _parse(raw_text: str) -> float:
    text = raw_text.strip()
    try:
        return float(text)
    except ValueError:
        pass
    # Fall back to the digits only, so "1,200 g" reads as 1200. A leading
    # minus survives so "-1,200 g" is still rejected as non-positive.
    cleaned = _NON_NUMERIC.sub("", text)
    if text.startswith("-"):
        cleaned = "-" + cleaned
    try:
        return float(cleaned)
    except ValueError:
        raise InvalidWeightError("not_a_number", "Enter the birth weight as a number of grams.") from None


def validate_weight(raw_text: str) -> float:
    """Parse raw weight text into grams, rejecting clinically implausible values.

    Checks run in a fixed order: numeric, then non-positive, then the upper
    and lower plausibility limits. The valid range is (200, 10000] g.
    """
    weight = _parse(raw_text)
    if math.isnan(weight):
        raise InvalidWeightError("not_a_number", "Enter the birth weight as a number of grams.")
    if weight <= 0:
        raise InvalidWeightError("non_positive", "Weight must be greater than 0 g.")
    if weight > MAX_WEIGHT_GRAMS:
        raise InvalidWeightError(
            "too_high", f"Weight above {MAX_WEIGHT_GRAMS:.0f} g is outside the neonatal range."
        )
    if weight <= MIN_WEIGHT_GRAMS:
        raise InvalidWeightError("too_low", f"Weight must be above {MIN_WEIGHT_GRAMS:.0f} g.")
    return weight
