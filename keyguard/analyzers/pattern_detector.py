"""
Structural Pattern Detector
============================

Rule-based detector for the structures that dominate leaked-password
corpora: counting runs, keyboard walks, dictionary words, names followed
by a year, sports teams, fictional characters, word-plus-number suffixes,
repeated characters, l33t substitutions and calendar dates.

Every rule emits :class:`DetectedPattern` records with a base confidence
calibrated against the RockYou leak. A global adjustment then raises
confidence for short passwords and lowers it slightly for passwords that
mix several character classes, capped at 0.99.

Detection is substring containment (case-insensitive) over fixed word
lists. When several rules match the same substring, each one is recorded
independently; the word+number, repeated-character, date and l33t rules
only report their first match.

Each word list holds a word once: "liverpool" (sports teams) and
"zxcvbnm" (keyboard walks) are listed a single time, so a password
containing one of them yields one pattern, not two, and earns the
hackability points of a single match.

References:
    - Weir, M., Aggarwal, S., de Medeiros, B., & Glodek, B. (2009).
      Password Cracking Using Probabilistic Context-Free Grammars.
      IEEE S&P.
    - Bonneau, J. (2012). The Science of Guessing: Analyzing an
      Anonymized Corpus of 70 Million Passwords. IEEE S&P.
"""

from __future__ import annotations

import re
from typing import Iterator

from keyguard.analyzers.entropy import character_classes
from keyguard.core.models import DetectedPattern, PatternType
from shared.math_utils import clamp


# ===================================================================== #
#  Word Lists (RockYou-derived)
# ===================================================================== #

_COMMON_WORDS: tuple[str, ...] = (
    "password", "welcome", "qwerty", "monkey", "dragon", "baseball", "football",
    "letmein", "master", "michael", "superman", "princess", "sunshine", "iloveyou",
    "trustno1", "batman", "angel", "summer", "winter", "autumn", "spring",
    "diamond", "shadow", "tigger", "charlie", "robert", "thomas", "hockey",
    "ranger", "daniel", "starwars", "klaster", "george", "computer", "michelle",
    "jessica", "pepper", "buster", "soccer", "london", "tennis", "montreal",
    "fishing", "maggie", "forever", "steelers", "jordan", "angelo", "awesome",
)

_POPULAR_PHRASES: tuple[str, ...] = (
    "iloveyou", "letmein", "whatever", "trustno1", "tinkle", "blessed",
    "lovely", "hottie", "teamo", "babygirl", "tinkerbell", "sweety",
    "warrior", "freedom", "poohbear", "mylove", "fuckyou", "nothing",
)

_KEYBOARD_PATTERNS: tuple[str, ...] = (
    "qwerty", "asdfgh", "zxcvbn", "qazwsx", "123qwe", "qwe123",
    "qwertyuiop", "asdfghjkl", "zxcvbnm", "wasd", "1qaz2wsx",
    "1q2w3e", "1q2w3e4r", "mnbvcxz", "poiuyt",
)

_COMMON_NAMES: tuple[str, ...] = (
    "michael", "john", "david", "james", "robert", "joseph", "thomas",
    "mary", "patricia", "jennifer", "linda", "elizabeth", "susan", "jessica",
    "christopher", "daniel", "matthew", "anthony", "mark", "donald", "steven",
    "andrew", "richard", "charles", "kevin", "jason", "jeffrey", "ryan",
    "ashley", "amanda", "stephanie", "melissa", "nicole", "kimberly", "emily",
    "michelle", "sarah", "brittany", "heather", "samantha", "rachel",
)

_SPORTS_TEAMS: tuple[str, ...] = (
    "arsenal", "chelsea", "yankees", "lakers", "cowboys", "steelers",
    "liverpool", "barcelona", "realmadrid", "manchester", "united",
    "celtic", "rangers", "juventus", "milan", "inter", "chicago", "dallas",
    "patriots", "raiders", "packers", "eagles", "giants",
)

_MOVIE_CHARACTERS: tuple[str, ...] = (
    "batman", "superman", "spiderman", "ironman", "wolverine", "potter",
    "gandalf", "frodo", "skywalker", "vader", "naruto", "spongebob",
    "simpsons", "homer", "pokemon", "pikachu", "mickey", "donald", "goofy",
)

# (pattern type, description, base confidence) per word list
_WORD_LIST_RULES: tuple[tuple[tuple[str, ...], PatternType, str, float], ...] = (
    (_KEYBOARD_PATTERNS, PatternType.KEYBOARD, "Keyboard pattern", 0.94),
    (_COMMON_WORDS, PatternType.COMMON_WORD, "Common dictionary word", 0.93),
    (_POPULAR_PHRASES, PatternType.POPULAR_PHRASE, "Popular phrase from leaks", 0.92),
)

_NAME_YEAR_RULES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(rf"{name}(19|20)\d{{2}}") for name in _COMMON_NAMES
)

_DIGIT_RUN_RE = re.compile(r"\d{3,}")
_WORD_NUMBER_RE = re.compile(r"([a-zA-Z]{3,})(\d+)")
_REPEATING_RE = re.compile(r"(.)\1{2,}")
_LEET_RE = re.compile(r"[a4][e3][i1!][o0]|[p9][a@][s$][s5]")
_DATE_RE = re.compile(
    r"(0[1-9]|1[0-2])[/\-](0[1-9]|[12][0-9]|3[01])[/\-](19|20)\d{2}"
)

_CONFIDENCE_CAP = 0.99


def is_sequential_number(digits: str) -> bool:
    """Return ``True`` if *digits* counts up or down by one ("1234", "987").

    Tracking stops as soon as the run is neither ascending nor descending.
    """
    if len(digits) < 3:
        return False

    ascending = True
    descending = True
    for previous, current in zip(digits, digits[1:]):
        delta = int(current) - int(previous)
        if delta != 1:
            ascending = False
        if delta != -1:
            descending = False
        if not ascending and not descending:
            return False
    return ascending or descending


class PatternDetector:
    """Detects weak-password structures and scores each with a confidence.

    Usage::

        detector = PatternDetector()
        for pattern in detector.detect("john1987!"):
            print(pattern.type.value, pattern.confidence)
    """

    def detect(self, password: str) -> list[DetectedPattern]:
        """Run every rule over *password* and apply the global adjustment.

        Args:
            password: Password to inspect. The empty string yields no
                patterns.

        Returns:
            Detected patterns in rule order; empty when nothing fires.
        """
        raw = list(self._run_rules(password))
        if not raw:
            return []

        factor = self._adjustment_factor(password)
        return [
            pattern.model_copy(
                update={
                    "confidence": clamp(pattern.confidence * factor, 0.0, _CONFIDENCE_CAP)
                }
            )
            for pattern in raw
        ]

    # ------------------------------------------------------------------ #
    #  Rules
    # ------------------------------------------------------------------ #

    def _run_rules(self, password: str) -> Iterator[DetectedPattern]:
        lowered = password.lower()

        yield from self._detect_sequential_numbers(password)

        for words, pattern_type, description, confidence in _WORD_LIST_RULES:
            yield from self._detect_substrings(
                lowered, words, pattern_type, description, confidence
            )

        for rule in _NAME_YEAR_RULES:
            match = rule.search(lowered)
            if match:
                yield _pattern(
                    PatternType.NAME_YEAR, "Name followed by year", 0.96,
                    match.start(), match.end(),
                )

        yield from self._detect_substrings(
            lowered, _SPORTS_TEAMS, PatternType.SPORTS_TEAM, "Sports team name", 0.91
        )
        yield from self._detect_substrings(
            lowered, _MOVIE_CHARACTERS, PatternType.MOVIE_CHARACTER, "Movie/TV character", 0.90
        )

        match = _WORD_NUMBER_RE.search(password)
        if match:
            yield _pattern(
                PatternType.WORD_NUMBER, "Word followed by numbers", 0.89,
                match.start(), match.end(),
            )

        match = _REPEATING_RE.search(password)
        if match:
            yield _pattern(
                PatternType.REPEATING, "Repeating characters", 0.88,
                match.start(), match.end(),
            )

        # Presence only: the span covers the whole password
        if _LEET_RE.search(lowered):
            yield _pattern(
                PatternType.LEET_SPEAK, "Leet speak substitutions", 0.85,
                0, len(password),
            )

        match = _DATE_RE.search(password)
        if match:
            yield _pattern(
                PatternType.DATE, "Date format", 0.93, match.start(), match.end()
            )

    @staticmethod
    def _detect_sequential_numbers(password: str) -> Iterator[DetectedPattern]:
        """Digit runs of three or more that count up or down by one."""
        for match in _DIGIT_RUN_RE.finditer(password):
            run = match.group()
            if is_sequential_number(run):
                start = password.index(run)
                yield _pattern(
                    PatternType.SEQUENTIAL, "Sequential numbers", 0.95,
                    start, start + len(run),
                )

    @staticmethod
    def _detect_substrings(
        lowered: str,
        words: tuple[str, ...],
        pattern_type: PatternType,
        description: str,
        confidence: float,
    ) -> Iterator[DetectedPattern]:
        for word in words:
            start = lowered.find(word)
            if start >= 0:
                yield _pattern(
                    pattern_type, description, confidence, start, start + len(word)
                )

    # ------------------------------------------------------------------ #
    #  Confidence adjustment
    # ------------------------------------------------------------------ #

    @staticmethod
    def _adjustment_factor(password: str) -> float:
        """Multiplier applied to every raw confidence.

        Short passwords make a detected pattern more decisive
        (length factor 0.9 below 8 characters, 0.7 below 12, else 0.3);
        each character class present trims confidence by 2.5%.
        """
        length = len(password)
        if length < 8:
            length_factor = 0.9
        elif length < 12:
            length_factor = 0.7
        else:
            length_factor = 0.3

        charset_factor = sum(character_classes(password)) / 4
        return (1 + length_factor * 0.2) * (1 - charset_factor * 0.1)


def _pattern(
    pattern_type: PatternType,
    description: str,
    confidence: float,
    start: int,
    stop: int,
) -> DetectedPattern:
    """Build a pattern from a half-open ``[start, stop)`` span."""
    return DetectedPattern(
        type=pattern_type,
        description=description,
        confidence=confidence,
        position=(start, stop - 1),
    )


def detect_patterns(password: str) -> list[DetectedPattern]:
    """Module-level shortcut for :meth:`PatternDetector.detect`."""
    return PatternDetector().detect(password)
