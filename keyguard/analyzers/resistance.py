"""
Attack-Resistance Scorer
=========================

Maps entropy and detected patterns onto four 0-100 resistance scores,
one per attack family, and a weighted overall figure.

    brute_force    min(100, 1.5 × entropy)
    dictionary     100, or max(20, 100 − 80 × avg confidence) of word patterns
    pattern_based  100, or max(10, 100 − 90 × avg confidence) of structural patterns
    ai_attack      85 (−20 below 12 characters), then
                   max(25, ai − 60 × avg confidence) of substitution patterns
    overall        0.30·bf + 0.25·dict + 0.25·pattern + 0.20·ai

Each sub-score is rounded on its own; the overall figure is computed from
the rounded sub-scores, so it always agrees with what is displayed.

Runs of one repeated character (``repeating``) count as structural
patterns and therefore lower ``pattern_based`` alongside sequences,
keyboard walks, dates, name+year and word+number.
"""

from __future__ import annotations

from typing import Optional, Sequence

from keyguard.core.models import AttackResistance, DetectedPattern, PatternType
from shared.math_utils import mean, round_half_up


_DICTIONARY_TYPES: frozenset[PatternType] = frozenset({
    PatternType.COMMON_WORD,
    PatternType.POPULAR_PHRASE,
    PatternType.SPORTS_TEAM,
    PatternType.MOVIE_CHARACTER,
})

_STRUCTURAL_TYPES: frozenset[PatternType] = frozenset({
    PatternType.SEQUENTIAL,
    PatternType.KEYBOARD,
    PatternType.REPEATING,
    PatternType.DATE,
    PatternType.NAME_YEAR,
    PatternType.WORD_NUMBER,
})

_AI_VULNERABLE_TYPES: frozenset[PatternType] = frozenset({
    PatternType.LEET_SPEAK,
    PatternType.CHARACTER_SUBSTITUTION,
    PatternType.CAPITALIZED_WORD,
    PatternType.WORD_SPECIAL,
})

_WEIGHTS = (0.30, 0.25, 0.25, 0.20)


def _average_confidence(
    patterns: Sequence[DetectedPattern], types: frozenset[PatternType]
) -> Optional[float]:
    confidences = [p.confidence for p in patterns if p.type in types]
    if not confidences:
        return None
    return mean(confidences)


def calculate_attack_resistance(
    password: str,
    patterns: Sequence[DetectedPattern],
    entropy: float,
) -> AttackResistance:
    """Score *password*'s resistance to four attack families.

    Args:
        password: The analysed password (only its length is used).
        patterns: Structural patterns detected for it.
        entropy: Its entropy in bits.

    Returns:
        AttackResistance with integer sub-scores in [0, 100].
    """
    brute_force = min(100.0, entropy * 1.5)

    dictionary = 100.0
    avg = _average_confidence(patterns, _DICTIONARY_TYPES)
    if avg is not None:
        dictionary = max(20.0, 100 - avg * 80)

    pattern_based = 100.0
    avg = _average_confidence(patterns, _STRUCTURAL_TYPES)
    if avg is not None:
        pattern_based = max(10.0, 100 - avg * 90)

    ai_attack = 85.0
    if len(password) < 12:
        ai_attack -= 20
    avg = _average_confidence(patterns, _AI_VULNERABLE_TYPES)
    if avg is not None:
        ai_attack = max(25.0, ai_attack - avg * 60)

    scores = [
        round_half_up(value)
        for value in (brute_force, dictionary, pattern_based, ai_attack)
    ]
    overall = round_half_up(sum(w * s for w, s in zip(_WEIGHTS, scores)))

    return AttackResistance(
        brute_force=scores[0],
        dictionary=scores[1],
        pattern_based=scores[2],
        ai_attack=scores[3],
        overall=overall,
    )
