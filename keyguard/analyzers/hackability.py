"""
Hackability Scorer
===================

Point-based estimate of how quickly a real attacker would break a
password, with the reasons that drove the score.

    +50  exact match in the breach-frequency table
    +10  per structural pattern with confidence > 0.8
    +20  length < 8, or +10 for length < 12
    +15  entropy < 40 bits

The risk tier is taken from the raw total before it is clamped to 100.
``time_to_hack`` comes from the SHA-256/GPU crack time rather than from
the points, so a "critical" password can still show "Months".

The breach table is a fixed excerpt of the RockYou top 10; no live
breach service is queried.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence

from keyguard.analyzers.crack_time import crack_time_bucket
from keyguard.core.models import DetectedPattern, HackabilityScore, RiskLevel
from shared.math_utils import round_half_up


ROCKYOU_FREQUENCY: Mapping[str, int] = MappingProxyType({
    "123456": 290_729,
    "12345": 79_076,
    "123456789": 59_462,
    "password": 59_184,
    "iloveyou": 49_952,
    "princess": 33_291,
    "1234567": 21_725,
    "rockyou": 20_901,
    "12345678": 20_553,
    "abc123": 17_542,
})

_HIGH_CONFIDENCE = 0.8
_FALLBACK_REASON = "Multiple subtle weakness patterns detected"


def _risk_level(points: int) -> RiskLevel:
    if points > 80:
        return RiskLevel.CRITICAL
    if points > 60:
        return RiskLevel.HIGH
    if points > 40:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def calculate_hackability_score(
    password: str,
    patterns: Sequence[DetectedPattern],
    entropy: float,
    crack_time_seconds: float,
) -> HackabilityScore:
    """Score how hackable *password* is on a 0-100 scale.

    Args:
        password: The analysed password.
        patterns: Structural patterns detected for it.
        entropy: Its entropy in bits.
        crack_time_seconds: SHA-256/GPU time-to-crack, used for
            ``time_to_hack`` only.

    Returns:
        HackabilityScore with score, reasoning, time bucket and risk tier.
    """
    points = 0
    reasons: list[str] = []

    frequency = ROCKYOU_FREQUENCY.get(password.lower())
    if frequency:
        points += 50
        reasons.append(
            f"This exact password appeared {frequency} times in the RockYou data breach"
        )

    for pattern in patterns:
        if pattern.confidence > _HIGH_CONFIDENCE:
            points += 10
            reasons.append(
                f"Contains a {pattern.description.lower()} "
                f"({round_half_up(pattern.confidence * 100)}% confidence)"
            )

    length = len(password)
    if length < 8:
        points += 20
        reasons.append(f"Short password ({length} characters) can be brute forced quickly")
    elif length < 12:
        points += 10
        reasons.append(
            f"Moderate length password ({length} characters) offers limited protection"
        )

    if entropy < 40:
        points += 15
        reasons.append(
            f"Low entropy ({round_half_up(entropy)} bits) indicates predictable "
            "character combinations"
        )

    risk_level = _risk_level(points)
    score = min(100, points)

    if not reasons and score > 30:
        reasons.append(_FALLBACK_REASON)

    return HackabilityScore(
        score=score,
        reasoning=reasons,
        time_to_hack=crack_time_bucket(crack_time_seconds),
        risk_level=risk_level,
    )
