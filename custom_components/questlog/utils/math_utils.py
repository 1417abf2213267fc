# File: utils/math_utils.py
"""Math and calculation utilities for Questlog.

Pure Python math functions with ZERO Home Assistant dependencies.

Functions:
    - round_xp: Consistent rounding to configured precision
    - clamp: Bound a value to a closed range
    - clamp_count: Bound a quest counter to [0, required]
    - calculate_ratio: Progress ratio in [0, 1]
    - calculate_percentage: Progress percentage calculations
"""

from __future__ import annotations

# Default float precision for XP rounding
DATA_FLOAT_PRECISION = 2


def round_xp(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round an XP value to the configured precision.

    Examples:
        round_xp(10.456) → 10.46
        round_xp(10.0) → 10.0
    """
    return round(float(value), precision)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
    """
    return max(min_val, min(value, max_val))


def clamp_count(value: int, required: int) -> int:
    """Clamp a quest counter to [0, required]."""
    return int(clamp(int(value), 0, int(required)))


def calculate_ratio(current: float, target: float) -> float:
    """Return current/target bounded to [0.0, 1.0].

    A non-positive target yields 0.0.
    """
    if target <= 0:
        return 0.0
    return clamp(current / target, 0.0, 1.0)


def calculate_percentage(
    current: float, target: float, precision: int = DATA_FLOAT_PRECISION
) -> float:
    """Calculate a percentage with division-by-zero protection.

    Examples:
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0
    """
    if target <= 0:
        return 0.0
    return round_xp((current / target) * 100, precision)
