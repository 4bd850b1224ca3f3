"""
Statistical Calculations

Small reductions shared by the segmentation and car info code:
- Mean over finite readings
- Ratio of flagged samples
"""

import math
import statistics as stats_module
from typing import Iterable, Optional, Sequence


def is_finite_number(value) -> bool:
    """True for ints/floats that are neither NaN nor infinite (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def finite_values(values: Iterable) -> list:
    return [v for v in values if is_finite_number(v)]


def calculate_finite_mean(values: Iterable, precision: Optional[int] = None) -> Optional[float]:
    """
    Mean of the finite numeric values, or None if there are none.

    Examples:
        >>> calculate_finite_mean([10.0, None, 20.0])
        15.0
        >>> calculate_finite_mean([None, float('nan')])
        None
    """
    numbers = finite_values(values)
    if not numbers:
        return None

    mean = stats_module.fmean(numbers)
    if precision is not None:
        return round(mean, precision)
    return mean


def calculate_flag_ratio(flags: Sequence[bool]) -> float:
    """
    Fraction of truthy flags (0 for an empty sequence).

    Examples:
        >>> calculate_flag_ratio([True, False, True, True])
        0.75
    """
    if not flags:
        return 0.0
    return sum(1 for flag in flags if flag) / len(flags)


def calculate_weighted_ratio(
    ratio_a: float,
    weight_a: float,
    ratio_b: float,
    weight_b: float
) -> float:
    """
    Weighted average of two ratios; a zero total weight divides by 1.

    Examples:
        >>> calculate_weighted_ratio(1.0, 30.0, 0.0, 10.0)
        0.75
        >>> calculate_weighted_ratio(0.5, 0.0, 0.2, 0.0)
        0.0
    """
    total_weight = weight_a + weight_b
    return (ratio_a * weight_a + ratio_b * weight_b) / (total_weight or 1)
