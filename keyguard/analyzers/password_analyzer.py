"""
Password Analysis Orchestrator
===============================

Single entry point of the analysis engine. One call runs every analyzer
over a password and assembles an immutable :class:`PasswordAnalysis`:

    common-pattern matcher ─┐
    pattern detector ───────┼─> entropy ─┬─> crack-time simulator
                            │            ├─> attack-resistance scorer
                            │            └─> hackability scorer
                            └─> score ──────> suggestions, rewriter, passphrases

Score (0-4):
    0 for a leaked password or fewer than 6 characters; otherwise
    +1 at 8 characters, +1 at 12, +min(2, classes / 2), +1 above 60 bits,
    −1 for any common-pattern match, −1 when the structural patterns are
    confident on average (> 0.9) or two exceed 0.85, and −1 more when one
    exceeds 0.95. Each deduction floors at 0. Rounded half up, capped at 4.

Detecting an additional pattern can lower the score of an otherwise
stronger password. Scores are therefore not monotonic in password
"quality"; this is intended.

Only the rewriter and the passphrase generator consume randomness. All
other fields depend on the password alone.

Suggestions carry no duplicates: two detected patterns of the same type
contribute their advice once.

References:
    - Weir, M. et al. (2010). Testing Metrics for Password Creation
      Policies by Attacking Large Sets of Revealed Passwords. CCS.
    - NIST SP 800-63B (2017). Digital Identity Guidelines.
"""

from __future__ import annotations

import random
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from keyguard.analyzers.common_patterns import match_common_patterns
from keyguard.analyzers.crack_time import (
    OFFLINE_GPU_LABEL,
    estimate_crack_time,
    format_crack_time,
)
from keyguard.analyzers.enhancer import PasswordEnhancer
from keyguard.analyzers.entropy import (
    CharacterClasses,
    calculate_entropy,
    character_classes,
)
from keyguard.analyzers.hackability import calculate_hackability_score
from keyguard.analyzers.passphrase import PassphraseGenerator
from keyguard.analyzers.pattern_detector import PatternDetector
from keyguard.analyzers.resistance import calculate_attack_resistance
from keyguard.core.errors import InvalidInputError
from keyguard.core.models import (
    CommonPatternResult,
    DetectedPattern,
    EnhancementResult,
    PasswordAnalysis,
    PatternType,
)
from shared.math_utils import pow2, round_half_up


# ===================================================================== #
#  Leaked Password List (RockYou top ~100)
# ===================================================================== #

COMMON_PASSWORDS: frozenset[str] = frozenset({
    "password", "123456", "qwerty", "admin", "welcome", "123456789", "12345678",
    "abc123", "football", "monkey", "letmein", "111111", "mustang", "access",
    "shadow", "master", "michael", "superman", "696969", "123123", "batman",
    "trustno1", "baseball", "dragon", "password1", "hunter2", "iloveyou",
    "sunshine", "princess", "qwertyuiop", "nicole", "daniel", "babygirl",
    "monkey1", "lovely", "jessica", "654321", "michael1", "ashley", "qwerty1",
    "111222", "iloveu", "000000", "michelle", "tigger", "sunshine1", "chocolate",
    "anthony", "soccer", "friends", "butterfly", "purple", "angel1", "jordan",
    "liverpool", "justin", "loveme", "fuckyou", "123321", "football1", "secret",
    "andrea", "carlos", "jennifer", "joshua", "bubbles", "1234567890", "superman1",
    "hannah", "amanda", "loveyou", "pretty", "basketball", "andrew", "angels",
    "tweety", "flower", "playboy", "hello", "elizabeth", "hottie", "tinkerbell",
    "charlie", "samantha", "barbie", "chelsea", "lovers", "teamo", "jasmine",
    "brandon", "666666", "shadow1", "melissa", "eminem", "matthew", "robert",
})

_PATTERN_ADVICE: Mapping[PatternType, str] = MappingProxyType({
    PatternType.KEYBOARD:
        "Avoid keyboard patterns like 'qwerty' or 'asdfgh' that are easily guessed.",
    PatternType.SEQUENTIAL:
        "Sequential numbers like '12345' are among the first patterns attackers try.",
    PatternType.COMMON_WORD:
        "Common dictionary words are vulnerable to dictionary attacks.",
    PatternType.WORD_NUMBER:
        "The pattern 'word + numbers' (e.g., 'password123') is very common in "
        "leaked passwords.",
    PatternType.NAME_YEAR:
        "Using a name followed by a year (e.g., 'john2023') is found in over 8% of "
        "leaked passwords.",
    PatternType.DATE:
        "Date formats like birthdays are easily guessable with targeted attacks.",
    PatternType.REPEATING:
        "Repeating characters (e.g., 'aaa' or '111') significantly decrease "
        "password strength.",
    PatternType.SPORTS_TEAM:
        "Sports team names are commonly found in leaked password databases.",
    PatternType.MOVIE_CHARACTER:
        "Popular character names from movies/TV are frequently used in passwords.",
    PatternType.POPULAR_PHRASE:
        "Common phrases like 'iloveyou' appear in millions of leaked passwords.",
    PatternType.LEET_SPEAK:
        "Simple character substitutions (a→4, e→3) are well-known to attackers.",
})

PASSPHRASE_ADVICE = (
    "Try using a passphrase instead. Combine 3-4 random words with numbers and symbols."
)

TIME_TO_CRACK_LABELS = ("Brute Force (Offline)", "Online Attack", "Dictionary Attack")

_MIN_LENGTH = 6
_RECOMMENDED_LENGTH = 12
_TOP_PATTERN_ADVICE = 3
_PASSPHRASE_SUGGESTIONS = 3


def is_common_password(password: str) -> bool:
    """Case-insensitive membership in the leaked-password list."""
    return password.lower() in COMMON_PASSWORDS


def calculate_score(
    *,
    length: int,
    charset_count: int,
    is_common: bool,
    has_common_pattern: bool,
    patterns: Sequence[DetectedPattern],
    entropy: float,
) -> int:
    """Combine length, class coverage, entropy and patterns into a 0-4 grade."""
    if is_common or length < _MIN_LENGTH:
        return 0

    score = 0.0
    if length >= 8:
        score += 1
    if length >= _RECOMMENDED_LENGTH:
        score += 1
    score += min(2.0, charset_count / 2)
    if entropy > 60:
        score += 1

    if has_common_pattern:
        score = max(0.0, score - 1)

    if patterns:
        confidences = [p.confidence for p in patterns]
        average = sum(confidences) / len(confidences)
        high = sum(1 for c in confidences if c > 0.85)
        if average > 0.9 or high >= 2:
            score = max(0.0, score - 1)
        if any(c > 0.95 for c in confidences):
            score = max(0.0, score - 1)

    return min(4, round_half_up(score))


class PasswordAnalyzer:
    """Runs the full analysis pipeline over a password.

    Usage::

        analyzer = PasswordAnalyzer()
        analysis = analyzer.analyze("Tr0ub4dor&3")
        print(analysis.score, analysis.time_to_crack["Brute Force (Offline)"])

    Args:
        rng: Random source shared by the rewriter and the passphrase
            generator. Two analyzers built with identically seeded sources
            return identical results for the same password.
        passphrase_count: Number of passphrase alternatives to attach.
        enhance_below_score: Scores below this get the rewritten password
            as a suggestion.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        *,
        passphrase_count: int = _PASSPHRASE_SUGGESTIONS,
        enhance_below_score: int = 3,
    ) -> None:
        rng = rng if rng is not None else random.SystemRandom()
        self._detector = PatternDetector()
        self._enhancer = PasswordEnhancer(rng)
        self._passphrases = PassphraseGenerator(rng)
        self._passphrase_count = passphrase_count
        self._enhance_below_score = enhance_below_score

    def analyze(self, password: str) -> PasswordAnalysis:
        """Analyse *password*.

        Any string, including the empty string, yields a complete record.

        Raises:
            InvalidInputError: *password* is not a string.
        """
        if not isinstance(password, str):
            raise InvalidInputError(
                f"password must be a string, not {type(password).__name__}"
            )

        classes = character_classes(password)
        is_common = is_common_password(password)
        common = match_common_patterns(password)
        patterns = self._detector.detect(password)
        entropy = calculate_entropy(password, patterns)

        score = calculate_score(
            length=len(password),
            charset_count=sum(classes),
            is_common=is_common,
            has_common_pattern=common.found,
            patterns=patterns,
            entropy=entropy,
        )

        crack_times = estimate_crack_time(entropy)
        offline_gpu = crack_times[OFFLINE_GPU_LABEL]
        time_to_crack = {
            "Brute Force (Offline)": offline_gpu.time_to_break,
            "Online Attack": format_crack_time(pow2(entropy) / 1_000),
            "Dictionary Attack": format_crack_time(pow2(entropy / 2) / 1_000_000_000),
        }

        enhanced = self._enhancer.enhance(password, score)
        suggestions = self._suggestions(
            password=password,
            classes=classes,
            is_common=is_common,
            common=common,
            patterns=patterns,
            score=score,
            enhanced=enhanced,
        )

        return PasswordAnalysis(
            length=len(password),
            has_upper=classes.has_upper,
            has_lower=classes.has_lower,
            has_digit=classes.has_digit,
            has_special=classes.has_special,
            is_common=is_common,
            has_common_pattern=common.found,
            common_patterns=common.patterns,
            ml_patterns=patterns,
            entropy=entropy,
            score=score,
            crack_time_estimates=crack_times,
            time_to_crack=time_to_crack,
            suggestions=suggestions,
            ai_enhanced=enhanced,
            attack_resistance=calculate_attack_resistance(password, patterns, entropy),
            hackability_score=calculate_hackability_score(
                password, patterns, entropy, offline_gpu.time_in_seconds
            ),
            passphrase_suggestions=self._passphrases.generate_suggestions(
                self._passphrase_count
            ),
        )

    # ------------------------------------------------------------------ #
    #  Suggestions
    # ------------------------------------------------------------------ #

    def _suggestions(
        self,
        *,
        password: str,
        classes: CharacterClasses,
        is_common: bool,
        common: CommonPatternResult,
        patterns: Sequence[DetectedPattern],
        score: int,
        enhanced: EnhancementResult,
    ) -> list[str]:
        suggestions: list[str] = []

        if len(password) < _RECOMMENDED_LENGTH:
            suggestions.append("Increase password length to at least 12 characters.")
        if not classes.has_upper:
            suggestions.append("Add uppercase letters (A-Z).")
        if not classes.has_lower:
            suggestions.append("Add lowercase letters (a-z).")
        if not classes.has_digit:
            suggestions.append("Add numeric digits (0-9).")
        if not classes.has_special:
            suggestions.append("Add special characters (!, @, #, $, %, etc).")

        if is_common:
            suggestions.append("Your password is too common. Choose something more unique.")
        if common.found:
            suggestions.append(f"Avoid common patterns ({', '.join(common.patterns)}).")

        # sorted() is stable: equal confidences keep detector order
        top = sorted(patterns, key=lambda p: p.confidence, reverse=True)
        for pattern in top[:_TOP_PATTERN_ADVICE]:
            advice = _PATTERN_ADVICE.get(pattern.type)
            if advice and advice not in suggestions:
                suggestions.append(advice)

        if score < self._enhance_below_score and enhanced.enhanced_password != password:
            suggestions.append(
                f'Try this AI-enhanced alternative: "{enhanced.enhanced_password}"'
            )
        if score < 4:
            suggestions.append(PASSPHRASE_ADVICE)

        return suggestions


def analyze_password(
    password: str, rng: Optional[random.Random] = None
) -> PasswordAnalysis:
    """Module-level shortcut for :meth:`PasswordAnalyzer.analyze`."""
    return PasswordAnalyzer(rng).analyze(password)
