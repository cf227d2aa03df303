"""
Decimal Utilities
app/scoring/utils.py

Provides precision-safe decimal math for scoring calculations.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence, Union

Number = Union[int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Convert an int/float/Decimal to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Number) -> int:
    """
    Round to the nearest integer, halves rounding up.

    Python's built-in round() uses banker's rounding (round(12.5) == 12);
    scores must round 12.5 to 13.
    """
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp(
    value: Decimal,
    min_val: Decimal = Decimal("0"),
    max_val: Decimal = Decimal("100"),
) -> Decimal:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def percentage(numerator: Number, denominator: Number) -> Decimal:
    """
    100 × numerator / denominator as an exact Decimal.

    Returns Decimal("0") if the denominator is zero.
    """
    denom = to_decimal(denominator)
    if denom == 0:
        return Decimal("0")
    return Decimal("100") * to_decimal(numerator) / denom


def weighted_mean(values: Sequence[Number], weights: Sequence[Number]) -> Decimal:
    """
    Calculate weighted mean.

    Formula: Σ(value_i × weight_i) / Σ(weight_i)
    Returns Decimal("0") if all weights are zero.
    """
    if len(values) != len(weights):
        raise ValueError("values and weights must have same length")

    total_weight = sum((to_decimal(w) for w in weights), Decimal("0"))
    if total_weight == 0:
        return Decimal("0")

    numerator = sum(
        (to_decimal(v) * to_decimal(w) for v, w in zip(values, weights)),
        Decimal("0"),
    )
    return numerator / total_weight
