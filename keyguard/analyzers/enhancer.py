"""
Password Rewriter
==================

Turns a weak password into a stronger variant that still resembles the
original, by applying a fixed pipeline of randomized edits:

1. Replace the first well-known weak word with a stronger alternative.
2. Swap up to ``min(3, ceil(length / 4))`` random positions for
   look-alike glyphs (a -> @, s -> $, ...).
3. Uppercase one lowercase letter if no uppercase letter is present.
4. Insert a special character if none is present.
5. Insert a digit if none is present.
6. Pad with up to three random characters towards 12 characters.

Each applied step adds a note and a rough entropy gain; the gains are
fixed per step and are not recomputed from the result.

The random source is injected (any :class:`random.Random`-compatible
object) so tests can seed it. The default is :class:`random.SystemRandom`.
"""

from __future__ import annotations

import math
import random
import re
import string
from types import MappingProxyType
from typing import Mapping, Optional

from keyguard.core.errors import InvalidInputError
from keyguard.core.models import EnhancementResult


# ===================================================================== #
#  Transformation Tables
# ===================================================================== #

_SUBSTITUTIONS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "a": ("@", "4", "A"),
    "b": ("8", "B"),
    "c": ("(", "C"),
    "e": ("3", "E"),
    "i": ("!", "1", "I"),
    "l": ("1", "|", "L"),
    "o": ("0", "O"),
    "s": ("$", "5", "S"),
    "t": ("+", "7", "T"),
    "g": ("9", "G"),
    "z": ("2", "Z"),
})

# Table order decides which word is replaced when several are present
_WORD_REPLACEMENTS: tuple[tuple[re.Pattern[str], tuple[str, ...]], ...] = tuple(
    (re.compile(word, re.IGNORECASE), replacements)
    for word, replacements in (
        ("password", ("P@$$w0rd", "SecretKey", "Pr1v@teK3y")),
        ("welcome", ("W3lc0m3", "Gr33t1ngs", "H3ll0There")),
        ("admin", ("@dm1n", "Syst3mUser", "R00tUs3r")),
        ("login", ("L0g1n", "S1gn0n", "@cc3ss")),
        ("summer", ("Summ3r", "S0lstice", "W@rmSe@son")),
        ("winter", ("W1nt3r", "Fr0stTime", "Sn0wSeason")),
        ("secret", ("S3cr3t", "H1dd3n", "Crypt1c")),
    )
)

_SPECIAL_CHARACTERS = "!@#$%^&*()-_=+[]{}|;:,.<>?/"

_UPPER_RE = re.compile(r"[A-Z]")
_LOWER_RE = re.compile(r"[a-z]")
_SPECIAL_RE = re.compile(r"[^A-Za-z0-9]")
_DIGIT_RE = re.compile(r"\d")

_TARGET_LENGTH = 12
_MAX_PADDING = 3
_MAX_SUBSTITUTIONS = 3

ALREADY_STRONG_NOTE = "Your password is already strong."
EMPTY_PASSWORD_NOTE = "Nothing to enhance: the password is empty."


class PasswordEnhancer:
    """Randomized rewriter producing a stronger variant of a password.

    Usage::

        enhancer = PasswordEnhancer(rng=random.Random(7))
        result = enhancer.enhance("summer", current_score=0)
        print(result.enhanced_password, result.improvements)
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.SystemRandom()

    def enhance(self, password: str, current_score: int) -> EnhancementResult:
        """Rewrite *password* unless it already scores 4.

        Args:
            password: Password to strengthen.
            current_score: Its 0-4 strength score.

        Returns:
            EnhancementResult; the password passes through unchanged with
            an explanatory note when it is empty or already scores 4.

        Raises:
            InvalidInputError: *password* is not a string or
                *current_score* is not an integer in [0, 4].
        """
        if not isinstance(password, str):
            raise InvalidInputError(
                f"password must be a string, not {type(password).__name__}"
            )
        if (
            isinstance(current_score, bool)
            or not isinstance(current_score, int)
            or not 0 <= current_score <= 4
        ):
            raise InvalidInputError(
                f"current_score must be an integer between 0 and 4, got {current_score!r}"
            )

        if current_score >= 4:
            return _pass_through(password, ALREADY_STRONG_NOTE)
        if not password:
            return _pass_through(password, EMPTY_PASSWORD_NOTE)

        enhanced = password
        improvements: list[str] = []
        gain = 0.0

        replaced = self._replace_common_word(enhanced)
        if replaced is not None:
            enhanced = replaced
            improvements.append("Replaced common word with stronger alternative")
            gain += 10

        enhanced, changes = self._apply_substitutions(enhanced)
        if changes:
            improvements.append(f"Applied {changes} character substitutions")
            gain += changes * 2

        capitalized = self._add_capitalization(enhanced)
        if capitalized is not None:
            enhanced = capitalized
            improvements.append("Added capitalization")
            gain += 2

        if not _SPECIAL_RE.search(enhanced):
            enhanced = self._insert(enhanced, self._rng.choice(_SPECIAL_CHARACTERS))
            improvements.append("Added special character")
            gain += 4

        if not _DIGIT_RE.search(enhanced):
            enhanced = self._insert(enhanced, self._rng.choice(string.digits))
            improvements.append("Added numeric character")
            gain += 3

        if len(enhanced) < _TARGET_LENGTH:
            padding = min(_MAX_PADDING, _TARGET_LENGTH - len(enhanced))
            for _ in range(padding):
                enhanced = self._insert(enhanced, self._random_character())
            improvements.append(f"Extended password length by {padding} characters")
            gain += padding * 4

        return EnhancementResult(
            original_password=password,
            enhanced_password=enhanced,
            improvements=improvements,
            strength_increase=gain,
        )

    # ------------------------------------------------------------------ #
    #  Steps
    # ------------------------------------------------------------------ #

    def _replace_common_word(self, password: str) -> Optional[str]:
        """Replace the first listed weak word found, or return ``None``."""
        for pattern, replacements in _WORD_REPLACEMENTS:
            if pattern.search(password):
                replacement = self._rng.choice(replacements)
                return pattern.sub(lambda _m: replacement, password, count=1)
        return None

    def _apply_substitutions(self, password: str) -> tuple[str, int]:
        """Swap look-alike glyphs in at most three random positions."""
        count = min(_MAX_SUBSTITUTIONS, math.ceil(len(password) / 4))
        positions = sorted(self._rng.sample(range(len(password)), count))

        chars = list(password)
        changes = 0
        for pos in positions:
            alternatives = _SUBSTITUTIONS.get(chars[pos].lower())
            if alternatives:
                chars[pos] = self._rng.choice(alternatives)
                changes += 1
        return "".join(chars), changes

    def _add_capitalization(self, password: str) -> Optional[str]:
        if _UPPER_RE.search(password):
            return None
        candidates = [m.start() for m in _LOWER_RE.finditer(password)]
        if not candidates:
            return None
        pos = self._rng.choice(candidates)
        return password[:pos] + password[pos].upper() + password[pos + 1:]

    def _random_character(self) -> str:
        pool = self._rng.choice(
            (_SPECIAL_CHARACTERS, string.digits, string.ascii_uppercase)
        )
        return self._rng.choice(pool)

    def _insert(self, password: str, char: str) -> str:
        pos = self._rng.randrange(len(password) + 1)
        return password[:pos] + char + password[pos:]


def _pass_through(password: str, note: str) -> EnhancementResult:
    return EnhancementResult(
        original_password=password,
        enhanced_password=password,
        improvements=[note],
        strength_increase=0.0,
    )


def enhance_password(
    password: str,
    current_score: int,
    rng: Optional[random.Random] = None,
) -> EnhancementResult:
    """Module-level shortcut for :meth:`PasswordEnhancer.enhance`."""
    return PasswordEnhancer(rng).enhance(password, current_score)
