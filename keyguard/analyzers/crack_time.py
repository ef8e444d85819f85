"""
Crack-Time Simulator
=====================

Converts an entropy estimate into the average time an offline attacker
needs to find the password, for five algorithm/hardware pairs:

    combinations     = 2^entropy
    average_guesses  = combinations / 2
    time_in_seconds  = average_guesses / hashes_per_second

Hash rates are fixed benchmark figures for consumer and rented hardware.
bcrypt is intentionally slow (cost factor 10-12); SHA-256 is unsalted
and runs at full GPU throughput.

An entropy of 0 (the empty password) needs no guessing at all, so every
scenario reports zero seconds.

References:
    - Hashcat benchmark tables (v6), RTX 4090 and CPU reference runs.
    - Provos, N. & Mazieres, D. (1999). A Future-Adaptable Password
      Scheme. USENIX ATC.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from keyguard.core.models import CrackEstimate, HashAlgorithm
from shared.math_utils import pow2, round_half_up


class _Scenario(NamedTuple):
    label: str
    algorithm: HashAlgorithm
    hashes_per_second: float


# ===================================================================== #
#  Benchmarks
# ===================================================================== #

_SCENARIOS: tuple[_Scenario, ...] = (
    _Scenario("bcrypt (CPU)", HashAlgorithm.BCRYPT, 15),
    _Scenario("bcrypt (GPU)", HashAlgorithm.BCRYPT, 50),
    _Scenario("SHA-256 (CPU)", HashAlgorithm.SHA256, 500_000_000),
    _Scenario("SHA-256 (GPU)", HashAlgorithm.SHA256, 8_600_000_000),
    _Scenario("SHA-256 (Cluster)", HashAlgorithm.SHA256, 100_000_000_000),
)

SCENARIO_LABELS: tuple[str, ...] = tuple(s.label for s in _SCENARIOS)
OFFLINE_GPU_LABEL = "SHA-256 (GPU)"

_MINUTE = 60
_HOUR = 3_600
_DAY = 86_400
_MONTH = 2_592_000       # 30 days
_YEAR = 31_536_000       # 365 days
_CENTURY = _YEAR * 100


def format_crack_time(seconds: float) -> str:
    """Render *seconds* as a bucketed, human-readable duration.

    >>> format_crack_time(0.2), format_crack_time(90), format_crack_time(5e9)
    ('Instantly', '2 minutes', '2 centuries')
    """
    if seconds < 1:
        return "Instantly"
    if seconds < _MINUTE:
        return f"{round_half_up(seconds)} seconds"
    if seconds < _HOUR:
        return f"{round_half_up(seconds / _MINUTE)} minutes"
    if seconds < _DAY:
        return f"{round_half_up(seconds / _HOUR)} hours"
    if seconds < _MONTH:
        return f"{round_half_up(seconds / _DAY)} days"
    if seconds < _YEAR:
        return f"{round_half_up(seconds / _MONTH)} months"
    if seconds < _CENTURY:
        return f"{round_half_up(seconds / _YEAR)} years"

    centuries = seconds / _CENTURY
    if centuries < 1_000:
        return f"{round_half_up(centuries)} centuries"
    if centuries < 1_000_000:
        return f"{round_half_up(centuries / 1_000)}k centuries"
    return "Heat death of universe"


def crack_time_bucket(seconds: float) -> str:
    """Single-word version of :func:`format_crack_time`'s buckets."""
    if seconds < 1:
        return "Instantly"
    if seconds < _MINUTE:
        return "Seconds"
    if seconds < _HOUR:
        return "Minutes"
    if seconds < _DAY:
        return "Hours"
    if seconds < _MONTH:
        return "Days"
    if seconds < _YEAR:
        return "Months"
    if seconds < _CENTURY:
        return "Years"
    return "Centuries"


def estimate_crack_time(entropy: float) -> dict[str, CrackEstimate]:
    """Estimate time-to-crack for every algorithm/hardware scenario.

    Args:
        entropy: Password entropy in bits (non-negative).

    Returns:
        Mapping of scenario label (``"bcrypt (CPU)"``, ``"SHA-256 (GPU)"``,
        ...) to :class:`CrackEstimate`. Times beyond float range are
        ``math.inf``.
    """
    if entropy <= 0 or math.isnan(entropy):
        average_guesses = 0.0
    else:
        average_guesses = pow2(entropy) / 2

    estimates: dict[str, CrackEstimate] = {}
    for scenario in _SCENARIOS:
        seconds = average_guesses / scenario.hashes_per_second
        estimates[scenario.label] = CrackEstimate(
            algorithm=scenario.algorithm,
            hashes_per_second=scenario.hashes_per_second,
            time_to_break=format_crack_time(seconds),
            time_in_seconds=seconds,
        )
    return estimates
