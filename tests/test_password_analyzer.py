"""End-to-end tests for the analysis orchestrator and the package API."""

from __future__ import annotations

import random

import pytest

import keyguard
from keyguard.analyzers.crack_time import SCENARIO_LABELS
from keyguard.analyzers.password_analyzer import (
    PASSPHRASE_ADVICE,
    TIME_TO_CRACK_LABELS,
    PasswordAnalyzer,
    analyze_password,
    calculate_score,
    is_common_password,
)
from keyguard.core.errors import InvalidInputError
from keyguard.core.models import PatternType


SAMPLE_PASSWORDS = [
    "",
    "a",
    "password",
    "Password123",
    "john1987",
    "qwertyuiop",
    "Tr0ub4dor&3",
    "correct horse battery staple",
    "aaaaaaaaaaaaaaaaaaaa",
    "12/25/1990",
    "ÜnïcødePässwörd!",
    "x" * 300,
]


class TestBounds:
    @pytest.mark.parametrize("password", SAMPLE_PASSWORDS)
    def test_score_and_entropy_ranges(self, password):
        analysis = analyze_password(password, random.Random(0))
        assert 0 <= analysis.score <= 4
        assert analysis.entropy >= 0
        assert analysis.length == len(password)
        for pattern in analysis.ml_patterns:
            assert 0.0 <= pattern.confidence <= 0.99

    @pytest.mark.parametrize("password", SAMPLE_PASSWORDS)
    def test_record_shape(self, password):
        analysis = analyze_password(password, random.Random(0))
        assert list(analysis.crack_time_estimates) == list(SCENARIO_LABELS)
        assert tuple(analysis.time_to_crack) == TIME_TO_CRACK_LABELS
        assert len(analysis.passphrase_suggestions) == 3
        assert analysis.ai_enhanced.original_password == password


class TestReferencePasswords:
    def test_empty(self, rng):
        analysis = analyze_password("", rng)
        assert analysis.score == 0
        assert analysis.entropy == 0
        assert not any((
            analysis.has_upper, analysis.has_lower, analysis.has_digit,
            analysis.has_special, analysis.is_common, analysis.has_common_pattern,
        ))
        assert analysis.common_patterns == []
        assert analysis.ml_patterns == []
        assert analysis.ai_enhanced.enhanced_password == ""

    def test_leaked_password_scores_zero(self, rng):
        analysis = analyze_password("password", rng)
        assert analysis.is_common is True
        assert analysis.score == 0
        assert "Your password is too common. Choose something more unique." in (
            analysis.suggestions
        )
        assert analysis.hackability_score.risk_level.value == "critical"

    def test_mixed_classes(self, rng):
        analysis = analyze_password("Tr0ub4dor&3", rng)
        assert analysis.has_upper and analysis.has_lower
        assert analysis.has_digit and analysis.has_special
        assert analysis.score >= 3

    def test_weak_password_gets_rewrite_suggestion(self, rng):
        analysis = analyze_password("summer12", rng)
        assert analysis.score == 0
        assert analysis.ai_enhanced.enhanced_password != "summer12"
        rewrite = (
            f'Try this AI-enhanced alternative: "{analysis.ai_enhanced.enhanced_password}"'
        )
        assert rewrite in analysis.suggestions
        assert analysis.suggestions[-1] == PASSPHRASE_ADVICE

    def test_strongest_score_has_no_rewrite_or_passphrase_advice(self, rng):
        analysis = analyze_password("xkqzvmwpQ!7", rng)
        assert analysis.score == 4
        assert analysis.ai_enhanced.enhanced_password == "xkqzvmwpQ!7"
        assert PASSPHRASE_ADVICE not in analysis.suggestions
        assert not any("AI-enhanced" in s for s in analysis.suggestions)


class TestSuggestions:
    def test_class_suggestions_come_first(self, rng):
        suggestions = analyze_password("abc", rng).suggestions
        assert suggestions[:4] == [
            "Increase password length to at least 12 characters.",
            "Add uppercase letters (A-Z).",
            "Add numeric digits (0-9).",
            "Add special characters (!, @, #, $, %, etc).",
        ]

    def test_pattern_advice_is_not_repeated(self, rng):
        suggestions = analyze_password("qwerty123", rng).suggestions
        assert len(suggestions) == len(set(suggestions))

    def test_common_patterns_are_listed(self, rng):
        suggestions = analyze_password("qwerty1990", rng).suggestions
        assert "Avoid common patterns (Keyboard pattern, Year pattern)." in suggestions


class TestDeterminism:
    @pytest.mark.parametrize("password", ["summer12", "Tr0ub4dor&3", ""])
    def test_identical_with_identically_seeded_sources(self, password):
        first = analyze_password(password, random.Random(99))
        second = analyze_password(password, random.Random(99))
        assert first == second
        assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)

    def test_deterministic_fields_ignore_randomness(self):
        first = analyze_password("john1987!", random.Random(1))
        second = analyze_password("john1987!", random.Random(2))
        assert first.score == second.score
        assert first.entropy == second.entropy
        assert first.ml_patterns == second.ml_patterns
        assert first.attack_resistance == second.attack_resistance
        assert first.hackability_score == second.hackability_score


class TestMonotonicity:
    def test_appending_a_new_class(self, rng):
        steps = ["xkqzvmwp", "xkqzvmwpQ", "xkqzvmwpQ!", "xkqzvmwpQ!7"]
        analyses = [analyze_password(pw, rng) for pw in steps]
        for before, after in zip(analyses, analyses[1:]):
            assert after.entropy > before.entropy
            assert after.score >= before.score


class TestScoring:
    def test_common_override(self):
        assert calculate_score(
            length=20, charset_count=4, is_common=True,
            has_common_pattern=False, patterns=[], entropy=120.0,
        ) == 0

    def test_short_override(self):
        assert calculate_score(
            length=5, charset_count=4, is_common=False,
            has_common_pattern=False, patterns=[], entropy=30.0,
        ) == 0

    def test_common_leaked_lookup_is_case_insensitive(self):
        assert is_common_password("PassWord")
        assert not is_common_password("password!")


class TestConfiguration:
    def test_passphrase_count(self, rng):
        analysis = PasswordAnalyzer(rng, passphrase_count=5).analyze("hello")
        assert len(analysis.passphrase_suggestions) == 5

    def test_enhance_threshold(self, rng):
        analysis = PasswordAnalyzer(rng, enhance_below_score=0).analyze("summer12")
        assert not any("AI-enhanced" in s for s in analysis.suggestions)


class TestPublicAPI:
    def test_package_shortcuts(self, rng):
        analysis = keyguard.analyze("hello", rng)
        assert analysis.length == 5
        assert keyguard.enhance("hello", 4).enhanced_password == "hello"
        assert len(keyguard.generate_passphrase_suggestions(2, rng)) == 2
        assert keyguard.generate_passphrase(rng=rng)

    def test_non_string_password(self):
        with pytest.raises(InvalidInputError):
            keyguard.analyze(1234)

    def test_camel_case_export(self, rng):
        data = keyguard.analyze("john1987", rng).model_dump(mode="json", by_alias=True)
        assert {"hasUpper", "isCommon", "mlPatterns", "aiEnhanced", "timeToCrack"} <= set(data)
        assert data["mlPatterns"][0]["type"] in {t.value for t in PatternType}
