"""
Scoring Utilities
nexus_engine/scoring/utils.py

Precision-safe helpers shared by the composite index calculators.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Mapping, Optional


def to_decimal(value: float, places: int = 4) -> Decimal:
    """Convert float to Decimal with explicit precision."""
    return Decimal(str(value)).quantize(
        Decimal(10) ** -places, rounding=ROUND_HALF_UP
    )


def clamp(value, min_val=0.0, max_val=100.0):
    """Clamp value to range [min_val, max_val]. Works for float and Decimal."""
    return max(min_val, min(max_val, value))


def round_score(value: float) -> int:
    """
    Round a raw score half-up and clamp it into [0, 100].

    Non-finite values collapse to 0 so a result never carries NaN.
    """
    if value is None or not math.isfinite(float(value)):
        return 0
    rounded = Decimal(str(float(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(clamp(rounded, Decimal("0"), Decimal("100")))


def weighted_sum(values: Mapping[str, float], weights: Mapping[str, Decimal]) -> Decimal:
    """
    Σ(value_k × weight_k) over the weight keys.

    Raises:
        KeyError: if a weighted component is missing from values
    """
    return sum(
        (Decimal(str(float(values[key]))) * weight for key, weight in weights.items()),
        Decimal("0"),
    )


def check_weights(weights: Mapping[str, Decimal], label: str = "weights") -> Dict[str, Decimal]:
    """
    Validate that weights are non-negative and sum to exactly 1.0.

    Returns:
        The weights as a plain dict of Decimals.
    """
    as_decimal = {k: Decimal(str(w)) for k, w in weights.items()}
    if any(w < 0 for w in as_decimal.values()):
        raise ValueError(f"{label} must be non-negative")
    total = sum(as_decimal.values(), Decimal("0"))
    if total != Decimal("1"):
        raise ValueError(f"{label} must sum to 1.0, got {total}")
    return as_decimal


def scaled_confidence(base: float, defaulted: int, total: int) -> float:
    """
    Reduce a calculator's base confidence by the share of defaulted inputs.

    Formula: base × (1 − 0.3 × defaulted / total), clamped to [0, 1]
    """
    if total <= 0:
        return round(clamp(base, 0.0, 1.0), 4)
    factor = 1.0 - 0.3 * (defaulted / total)
    return round(clamp(base * factor, 0.0, 1.0), 4)


def safe_ratio(numerator: float, denominator: float, default: Optional[float] = 0.0) -> Optional[float]:
    """Divide with zero-division protection."""
    if denominator == 0:
        return default
    return numerator / denominator


def mean(values: Iterable[float], default: float = 0.0) -> float:
    items = list(values)
    if not items:
        return default
    return sum(items) / len(items)
