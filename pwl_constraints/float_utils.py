"""
Tolerance-aware comparisons for tableau values.

All predicates treat values within ``epsilon`` of zero (or of each other)
as equal.
"""

from __future__ import annotations

import math

DEFAULT_EPSILON = 1e-10


def is_zero(x: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    return -epsilon <= x <= epsilon


def is_positive(x: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    return x > epsilon


def is_negative(x: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    return x < -epsilon


def are_equal(x: float, y: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    return is_zero(x - y, epsilon)


def gt(x: float, y: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    return is_positive(x - y, epsilon)


def is_finite(x: float) -> bool:
    return not (math.isinf(x) or math.isnan(x))
