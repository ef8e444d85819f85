"""Tests for the passphrase generator."""

from __future__ import annotations

import random
import re

import pytest

from keyguard.analyzers.passphrase import (
    PassphraseGenerator,
    calculate_passphrase_strength,
    coerce_options,
    generate_passphrase,
    generate_passphrase_suggestions,
    get_memorable_passphrases,
)
from keyguard.core.errors import InvalidInputError
from keyguard.core.models import PassphraseOptions

_SPECIALS = "!@#$%^&*?~"


def _uppercase_count(phrase: str) -> int:
    return sum(1 for ch in phrase if ch.isupper())


class TestGenerate:
    @pytest.mark.parametrize("seed", range(20))
    def test_default_options_cover_three_classes(self, seed):
        phrase = generate_passphrase(
            PassphraseOptions(
                word_count=4, add_number=True, add_special=True, capitalize_words=True
            ),
            rng=random.Random(seed),
        )
        assert re.search(r"[A-Z]", phrase)
        assert re.search(r"[0-9]", phrase)
        assert re.search(r"[^A-Za-z0-9]", phrase)
        assert phrase[-1] in _SPECIALS
        assert phrase[-2].isdigit()

    @pytest.mark.parametrize("word_count", [2, 3, 4, 5, 7, 12])
    def test_word_count(self, rng, word_count):
        phrase = PassphraseGenerator(rng).generate(word_count=word_count)
        assert _uppercase_count(phrase) == word_count

    def test_plain_words_only(self, rng):
        phrase = generate_passphrase(
            {"word_count": 3, "add_number": False, "add_special": False,
             "capitalize_words": False},
            rng=rng,
        )
        assert phrase.isalpha()
        assert phrase.islower()

    def test_camel_case_mapping_is_accepted(self, rng):
        phrase = generate_passphrase({"wordCount": 2, "addSpecial": False}, rng=rng)
        assert phrase[-1].isdigit()
        assert _uppercase_count(phrase) == 2

    def test_same_seed_same_phrase(self):
        assert generate_passphrase(rng=random.Random(9)) == generate_passphrase(
            rng=random.Random(9)
        )


class TestOptionValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"word_count": 1},
            {"word_count": 13},
            {"word_count": "4"},
            {"word_count": True},
            {"add_number": "yes"},
        ],
    )
    def test_invalid_options(self, overrides):
        with pytest.raises(InvalidInputError):
            coerce_options(None, **overrides)

    def test_non_mapping_options(self):
        with pytest.raises(InvalidInputError):
            coerce_options(["word_count", 4])

    def test_overrides_apply_on_top_of_model(self):
        opts = coerce_options(PassphraseOptions(word_count=6), add_number=False)
        assert opts.word_count == 6
        assert opts.add_number is False


class TestSuggestions:
    def test_three_shapes(self, rng):
        first, second, third = generate_passphrase_suggestions(3, rng)
        assert _uppercase_count(first) == 3
        assert _uppercase_count(second) == 4
        assert _uppercase_count(third) == 0
        assert third[:-2].islower()

    def test_zero_count(self, rng):
        assert generate_passphrase_suggestions(0, rng) == []

    def test_negative_count(self, rng):
        with pytest.raises(InvalidInputError):
            generate_passphrase_suggestions(-1, rng)


class TestMemorable:
    def test_hints(self, rng):
        three, four = get_memorable_passphrases(2, rng)
        assert three.hint.startswith("Imagine a ")
        assert " that is " in three.hint and " and " in three.hint
        assert four.hint.count(" a ") == 2
        assert _uppercase_count(three.passphrase) == 3
        assert _uppercase_count(four.passphrase) == 4


class TestStrength:
    def test_estimate(self):
        # 19 chars -> 3 words * 11 + 4 + 3 + 4
        assert calculate_passphrase_strength("AncientTigerJumps7!") == 44

    def test_short_phrase_counts_two_words(self):
        assert calculate_passphrase_strength("ab") == 22
