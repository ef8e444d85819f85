"""
Common-Pattern Matcher
=======================

Fast first-pass check of a password against a fixed, ordered table of
well-known weak shapes: keyboard rows, counting sequences, stock words
that top every leaked-password list, and year/date fragments.

Each rule contributes its description at most once, in table order, so
the output reads in the same order on every call.
"""

from __future__ import annotations

import re

from keyguard.core.models import CommonPatternResult


# ===================================================================== #
#  Rule Table
# ===================================================================== #

_COMMON_PATTERN_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^12345"), "Sequential numbers"),
    (re.compile(r"^qwerty", re.IGNORECASE), "Keyboard pattern"),
    (re.compile(r"^asdf", re.IGNORECASE), "Keyboard pattern"),
    (re.compile(r"^zxcv", re.IGNORECASE), "Keyboard pattern"),
    (re.compile(r"^abc", re.IGNORECASE), "Sequential letters"),
    (re.compile(r"password", re.IGNORECASE), "Contains 'password'"),
    (re.compile(r"^admin", re.IGNORECASE), "Administrative term"),
    (re.compile(r"^welcome", re.IGNORECASE), "Common greeting"),
    (re.compile(r"^letmein", re.IGNORECASE), "Common phrase"),
    (re.compile(r"^monkey", re.IGNORECASE), "Common animal"),
    (re.compile(r"^dragon", re.IGNORECASE), "Common mythical creature"),
    (re.compile(r"^football", re.IGNORECASE), "Common sport"),
    (re.compile(r"^baseball", re.IGNORECASE), "Common sport"),
    (re.compile(r"^superman", re.IGNORECASE), "Popular character"),
    (re.compile(r"^batman", re.IGNORECASE), "Popular character"),
    (re.compile(r"^trustno1", re.IGNORECASE), "Common phrase"),
    (re.compile(r"^sunshine", re.IGNORECASE), "Common nature term"),
    (re.compile(r"^princess", re.IGNORECASE), "Common term"),
    (re.compile(r"^iloveyou", re.IGNORECASE), "Common phrase"),
    (re.compile(r"^shadow", re.IGNORECASE), "Common term"),
    (re.compile(r"^master", re.IGNORECASE), "Common term"),
    (re.compile(r"(19|20)\d{2}"), "Year pattern"),
    (
        re.compile(
            r"\b(0?[1-9]|1[0-2])[/\-](0?[1-9]|[12]\d|3[01])[/\-](\d{2}|\d{4})\b"
        ),
        "Date pattern",
    ),
)


def match_common_patterns(password: str) -> CommonPatternResult:
    """Test *password* against every rule of the common-pattern table.

    Args:
        password: Any string, including the empty string.

    Returns:
        CommonPatternResult whose ``patterns`` lists the description of
        each matching rule in table order.
    """
    found = [
        description
        for pattern, description in _COMMON_PATTERN_RULES
        if pattern.search(password)
    ]
    return CommonPatternResult(found=bool(found), patterns=found)
