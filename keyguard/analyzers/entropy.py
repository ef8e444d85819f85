"""
Entropy Estimator
==================

Heuristic bits-of-entropy estimate for a password.

The estimate is the classic combinatorial model, discounted by how much
the password looks like a known weak structure:

    charset  = 26·[lower] + 26·[upper] + 10·[digit] + 33·[special]
    base     = length × log2(charset)
    entropy  = base × (1 − 0.4 × max_confidence)

where *max_confidence* is the strongest structural-pattern confidence
(0 when no pattern fires). A strong pattern can remove up to 40% of the
combinatorial entropy. This is deliberately not a Shannon or zxcvbn
style model.

References:
    - NIST SP 800-63-2 (2013), Appendix A: Estimating Password Entropy
      and Strength.
    - Shannon, C. E. (1948). A Mathematical Theory of Communication.
"""

from __future__ import annotations

import math
import re
from typing import NamedTuple, Sequence

from keyguard.core.models import DetectedPattern


_LOWER_RE = re.compile(r"[a-z]")
_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")
_SPECIAL_RE = re.compile(r"[^A-Za-z0-9]")

_LOWER_POOL = 26
_UPPER_POOL = 26
_DIGIT_POOL = 10
_SPECIAL_POOL = 33

# Share of the combinatorial entropy a certain pattern removes
_PATTERN_PENALTY_WEIGHT = 0.4


class CharacterClasses(NamedTuple):
    """Which of the four character classes a password uses."""

    has_upper: bool
    has_lower: bool
    has_digit: bool
    has_special: bool


def character_classes(password: str) -> CharacterClasses:
    """Derive the four class-coverage flags of *password*.

    Special means any character outside ``[A-Za-z0-9]``, so whitespace
    and non-ASCII letters count as special.
    """
    return CharacterClasses(
        has_upper=bool(_UPPER_RE.search(password)),
        has_lower=bool(_LOWER_RE.search(password)),
        has_digit=bool(_DIGIT_RE.search(password)),
        has_special=bool(_SPECIAL_RE.search(password)),
    )


def charset_size(classes: CharacterClasses) -> int:
    """Character pool size implied by *classes*; at least 1."""
    pool = 0
    if classes.has_lower:
        pool += _LOWER_POOL
    if classes.has_upper:
        pool += _UPPER_POOL
    if classes.has_digit:
        pool += _DIGIT_POOL
    if classes.has_special:
        pool += _SPECIAL_POOL
    return pool or 1


def calculate_entropy(password: str, patterns: Sequence[DetectedPattern]) -> float:
    """Pattern-discounted entropy of *password* in bits.

    Args:
        password: Password to estimate.
        patterns: Structural patterns already detected for *password*.

    Returns:
        Non-negative entropy; exactly ``0.0`` for the empty password.
    """
    if not password:
        return 0.0

    pool = charset_size(character_classes(password))
    base_entropy = len(password) * math.log2(pool)

    max_confidence = max((p.confidence for p in patterns), default=0.0)
    penalty = max_confidence * _PATTERN_PENALTY_WEIGHT
    return max(0.0, base_entropy * (1 - penalty))
