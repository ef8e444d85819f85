"""
Passphrase Generator
=====================

Builds pronounceable multi-word secrets from small adjective, noun and
verb lists, in the spirit of the EFF long wordlist:

    3 words   Adjective Noun Verb
    4 words   Adjective Noun Verb Noun
    5+ words  the 4-word shape extended with Adjective Noun pairs

Words can be capitalized and the phrase decorated with one digit and one
symbol. :func:`calculate_passphrase_strength` is only a rough estimate:
it guesses the word count from the length and assumes ~11 bits per word.

References:
    - EFF Dice-Generated Passphrases (2016).
      https://www.eff.org/dice
    - Reinhold, A. G. (1995). The Diceware Passphrase Home Page.
"""

from __future__ import annotations

import random
import re
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from keyguard.core.errors import InvalidInputError
from keyguard.core.models import MemorablePassphrase, PassphraseOptions


# ===================================================================== #
#  Word Lists
# ===================================================================== #

_NOUNS: tuple[str, ...] = (
    "apple", "arrow", "basket", "beach", "bird", "book", "bridge", "camera",
    "candle", "cloud", "coffee", "compass", "diamond", "dragon", "eagle",
    "forest", "garden", "guitar", "harbor", "island", "journey", "kettle",
    "lantern", "meadow", "mountain", "ocean", "panda", "planet", "river",
    "rocket", "saddle", "sandwich", "sunset", "tiger", "trumpet", "umbrella",
    "village", "window", "wizard", "zebra",
)

_ADJECTIVES: tuple[str, ...] = (
    "ancient", "bold", "calm", "daring", "elegant", "fierce", "gentle",
    "hidden", "intense", "jolly", "keen", "lively", "mystic", "noble",
    "peaceful", "quirky", "radiant", "silent", "tactical", "unique",
    "valiant", "wild", "zealous", "vibrant", "thoughtful", "serene",
    "rugged", "precise", "organic", "nimble",
)

_VERBS: tuple[str, ...] = (
    "admires", "builds", "creates", "defends", "explores", "follows",
    "gathers", "helps", "inspires", "jumps", "knows", "leads", "makes",
    "notices", "observes", "protects", "questions", "remembers", "searches",
    "teaches",
)

_SPECIAL_CHARACTERS: tuple[str, ...] = ("!", "@", "#", "$", "%", "^", "&", "*", "?", "~")
_DIGITS: tuple[str, ...] = ("2", "3", "4", "5", "6", "7", "8", "9")

# Cycled by generate_suggestions()
_SUGGESTION_OPTIONS: tuple[PassphraseOptions, ...] = (
    PassphraseOptions(word_count=3, capitalize_words=True),
    PassphraseOptions(word_count=4, capitalize_words=True),
    PassphraseOptions(word_count=3, capitalize_words=False),
)

_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")
_SPECIAL_RE = re.compile(r"[^A-Za-z0-9]")

_BITS_PER_WORD = 11

OptionsLike = Union[PassphraseOptions, Mapping[str, Any], None]


def coerce_options(options: OptionsLike = None, **overrides: Any) -> PassphraseOptions:
    """Validate *options* (model, mapping or ``None``) plus keyword overrides.

    Raises:
        InvalidInputError: A value has the wrong type or ``word_count`` is
            outside [2, 12].
    """
    if isinstance(options, PassphraseOptions) and not overrides:
        return options

    if options is None:
        data: dict[str, Any] = {}
    elif isinstance(options, PassphraseOptions):
        data = options.model_dump()
    elif isinstance(options, Mapping):
        data = dict(options)
    else:
        raise InvalidInputError(
            f"passphrase options must be a mapping, not {type(options).__name__}"
        )
    data.update(overrides)

    try:
        return PassphraseOptions.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid passphrase options: {exc}") from exc


def _check_count(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise InvalidInputError(f"count must be a non-negative integer, got {count!r}")


class PassphraseGenerator:
    """Random passphrase composer.

    Usage::

        generator = PassphraseGenerator(rng=random.Random(42))
        phrase = generator.generate(PassphraseOptions(word_count=5))
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.SystemRandom()

    def generate(self, options: OptionsLike = None, **overrides: Any) -> str:
        """Generate one passphrase.

        Args:
            options: :class:`PassphraseOptions`, a mapping of its fields
                (snake_case or camelCase), or ``None`` for the defaults.
            **overrides: Individual option fields, applied on top.

        Raises:
            InvalidInputError: Invalid options.
        """
        opts = coerce_options(options, **overrides)
        return self._decorate(self._pick_words(opts.word_count), opts)

    def generate_suggestions(self, count: int = 3) -> list[str]:
        """Generate *count* passphrases, cycling three preset shapes."""
        _check_count(count)
        return [
            self.generate(_SUGGESTION_OPTIONS[i % len(_SUGGESTION_OPTIONS)])
            for i in range(count)
        ]

    def memorable(self, count: int = 3) -> list[MemorablePassphrase]:
        """Generate *count* capitalized passphrases with mnemonic hints.

        Word counts alternate between 3 and 4. The hint reads
        "Imagine a <noun> that is <adjective> and <verb> a <noun>".
        """
        _check_count(count)
        results: list[MemorablePassphrase] = []
        for i in range(count):
            opts = PassphraseOptions(word_count=3 + i % 2)
            words = self._pick_words(opts.word_count)
            hint = f"Imagine a {words[1]} that is {words[0]} and {words[2]}"
            if len(words) >= 4:
                hint += f" a {words[3]}"
            results.append(
                MemorablePassphrase(passphrase=self._decorate(words, opts), hint=hint)
            )
        return results

    # ------------------------------------------------------------------ #
    #  Internals
    # ------------------------------------------------------------------ #

    def _pick_words(self, word_count: int) -> list[str]:
        choice = self._rng.choice
        if word_count < 4:
            words = [choice(_ADJECTIVES), choice(_NOUNS)]
            if word_count >= 3:
                words.append(choice(_VERBS))
            return words

        first_noun = choice(_NOUNS)
        words = [
            choice(_ADJECTIVES),
            first_noun,
            choice(_VERBS),
            choice([n for n in _NOUNS if n != first_noun]),
        ]
        while len(words) < word_count:
            words.append(choice([a for a in _ADJECTIVES if a not in words]))
            words.append(choice([n for n in _NOUNS if n not in words]))
        return words[:word_count]

    def _decorate(self, words: list[str], opts: PassphraseOptions) -> str:
        if opts.capitalize_words:
            words = [w[:1].upper() + w[1:] for w in words]
        phrase = "".join(words)
        if opts.add_number:
            phrase += self._rng.choice(_DIGITS)
        if opts.add_special:
            phrase += self._rng.choice(_SPECIAL_CHARACTERS)
        return phrase


# ===================================================================== #
#  Module-level API
# ===================================================================== #


def generate_passphrase(
    options: OptionsLike = None,
    rng: Optional[random.Random] = None,
    **overrides: Any,
) -> str:
    """Generate one passphrase; see :meth:`PassphraseGenerator.generate`."""
    return PassphraseGenerator(rng).generate(options, **overrides)


def generate_passphrase_suggestions(
    count: int = 3, rng: Optional[random.Random] = None
) -> list[str]:
    """Generate *count* passphrase suggestions."""
    return PassphraseGenerator(rng).generate_suggestions(count)


def get_memorable_passphrases(
    count: int = 3, rng: Optional[random.Random] = None
) -> list[MemorablePassphrase]:
    """Generate *count* passphrases with mnemonic hints."""
    return PassphraseGenerator(rng).memorable(count)


def calculate_passphrase_strength(passphrase: str) -> int:
    """Rough entropy estimate (bits) for a generated passphrase.

    The word count is inferred as ``max(2, len // 6)``; each word is worth
    ~11 bits, plus 4 for capitals, 3 for digits and 4 for symbols.
    """
    words = max(2, len(passphrase) // 6)
    bits = words * _BITS_PER_WORD
    if _UPPER_RE.search(passphrase):
        bits += 4
    if _DIGIT_RE.search(passphrase):
        bits += 3
    if _SPECIAL_RE.search(passphrase):
        bits += 4
    return bits
