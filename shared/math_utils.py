"""
Keyguard Mathematical Utilities
================================

Small numeric helpers shared by the analyzers.

Scores throughout Keyguard round halves upwards (``2.5 -> 3``), which is
how the published scoring tables were calibrated. Python's built-in
:func:`round` uses banker's rounding and would move some scores by one
point, so analyzers use :func:`round_half_up` instead.
"""

from __future__ import annotations

import math
from typing import Sequence


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity.

    >>> round_half_up(2.5), round_half_up(2.4999), round_half_up(-0.5)
    (3, 2, 0)
    """
    return int(math.floor(value + 0.5))


def pow2(exponent: float) -> float:
    """``2 ** exponent`` as a float, saturating to ``inf`` on overflow."""
    try:
        return math.pow(2.0, exponent)
    except OverflowError:
        return math.inf


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; ``0.0`` for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def clamp(value: float, low: float, high: float) -> float:
    """Constrain *value* to the closed interval ``[low, high]``."""
    return max(low, min(high, value))
