"""Tests for the common-pattern table and the structural pattern detector."""

from __future__ import annotations

import pytest

from keyguard.analyzers.common_patterns import match_common_patterns
from keyguard.analyzers.pattern_detector import (
    PatternDetector,
    detect_patterns,
    is_sequential_number,
)
from keyguard.core.models import PatternType


def _by_type(password: str) -> dict[PatternType, list]:
    found: dict[PatternType, list] = {}
    for pattern in detect_patterns(password):
        found.setdefault(pattern.type, []).append(pattern)
    return found


# --------------------------------------------------------------------- #
#  Common-pattern table
# --------------------------------------------------------------------- #


class TestCommonPatterns:
    def test_empty_password_matches_nothing(self):
        result = match_common_patterns("")
        assert result.found is False
        assert result.patterns == []

    def test_password_substring_anywhere(self):
        result = match_common_patterns("MyPassword!")
        assert result.found is True
        assert result.patterns == ["Contains 'password'"]

    def test_results_follow_table_order(self):
        assert match_common_patterns("qwerty1990").patterns == [
            "Keyboard pattern",
            "Year pattern",
        ]

    def test_anchored_rules_need_prefix(self):
        assert match_common_patterns("xabc").patterns == []
        assert match_common_patterns("ABCdef").patterns == ["Sequential letters"]

    def test_date_also_matches_year(self):
        assert match_common_patterns("01/02/2020").patterns == [
            "Year pattern",
            "Date pattern",
        ]


# --------------------------------------------------------------------- #
#  Structural detector
# --------------------------------------------------------------------- #


class TestSequentialNumbers:
    @pytest.mark.parametrize("digits", ["123", "1234", "987", "6543210"])
    def test_counting_runs(self, digits):
        assert is_sequential_number(digits)

    @pytest.mark.parametrize("digits", ["12", "1357", "1223", "1987", "111"])
    def test_non_counting_runs(self, digits):
        assert not is_sequential_number(digits)

    def test_position_is_inclusive(self):
        sequential = _by_type("abc123")[PatternType.SEQUENTIAL]
        assert [p.position for p in sequential] == [(3, 5)]


class TestDetector:
    def test_empty_password(self):
        assert PatternDetector().detect("") == []

    def test_keyboard_walk_is_also_a_common_word(self):
        found = _by_type("qwerty")
        assert found[PatternType.KEYBOARD][0].position == (0, 5)
        assert PatternType.COMMON_WORD in found

    def test_name_followed_by_year(self):
        found = _by_type("john1987")
        assert found[PatternType.NAME_YEAR][0].position == (0, 7)
        assert found[PatternType.WORD_NUMBER][0].position == (0, 7)

    def test_repeating_characters(self):
        assert _by_type("xaaay")[PatternType.REPEATING][0].position == (1, 3)

    def test_leet_span_covers_whole_password(self):
        leet = _by_type("myp@ssword")[PatternType.LEET_SPEAK]
        assert len(leet) == 1
        assert leet[0].position == (0, 9)

    def test_date_format(self):
        assert _by_type("12/25/1990")[PatternType.DATE][0].position == (0, 9)

    def test_word_number_reports_first_match_only(self):
        assert len(_by_type("abc1def2")[PatternType.WORD_NUMBER]) == 1

    def test_substring_detection_is_case_insensitive(self):
        assert PatternType.SPORTS_TEAM in _by_type("GoLAKERS")

    def test_sports_team_listed_once(self):
        assert len(_by_type("liverpool")[PatternType.SPORTS_TEAM]) == 1

    def test_keyboard_walk_entries_are_distinct(self):
        # "zxcvbn" and "zxcvbnm" both match; neither is reported twice
        walks = _by_type("zxcvbnm")[PatternType.KEYBOARD]
        assert len(walks) == 2
        assert len({p.position for p in walks}) == 2

    def test_confidence_adjustment_for_long_mixed_password(self):
        # 14 chars (length factor 0.3), all four classes
        patterns = detect_patterns("Xq9!mmmTzv#2Lp")
        assert [p.type for p in patterns] == [PatternType.REPEATING]
        expected = 0.88 * (1 + 0.3 * 0.2) * (1 - 0.1)
        assert patterns[0].confidence == pytest.approx(expected)

    @pytest.mark.parametrize(
        "password",
        ["aaa", "john1987", "qwerty123", "p@ss", "a" * 200, "Zz9!" * 50, "123"],
    )
    def test_confidence_is_clamped(self, password):
        for pattern in detect_patterns(password):
            assert 0.0 <= pattern.confidence <= 0.99

    def test_short_password_confidence_hits_cap(self):
        (repeating,) = detect_patterns("aaa")
        assert repeating.confidence == 0.99
