"""
Keyguard Core Data Models
==========================

Pydantic models for the Keyguard password analysis engine.

Attributes use Python naming; every engine-facing model serialises with
camelCase aliases (``model_dump(by_alias=True)``) so exported JSON keeps
the ``hasUpper`` / ``timeToCrack`` shape that front ends consume.
Engine output models are frozen: a new password always produces a new
record.

References:
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
    - Weir, M. et al. (2010). Testing Metrics for Password Creation
      Policies by Attacking Large Sets of Revealed Passwords. CCS.
"""

from __future__ import annotations

import datetime as _dt
import enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt
from pydantic.alias_generators import to_camel


class _EngineModel(BaseModel):
    """Frozen base with camelCase serialisation aliases.

    Non-finite floats serialise as the strings ``"Infinity"`` / ``"NaN"``
    so every JSON dump stays valid JSON.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=False,
        ser_json_inf_nan="strings",
    )


# ===================================================================== #
#  Enumerations
# ===================================================================== #


class PatternType(str, enum.Enum):
    """Kinds of weak-password structure the pattern detector reports.

    Some members (``capitalized_word``, ``word_special``,
    ``character_substitution``) are never emitted by the built-in rules
    but are recognised by the attack-resistance scorer.
    """

    SEQUENTIAL = "sequential"
    KEYBOARD = "keyboard"
    REPEATING = "repeating"
    DATE = "date"
    COMMON_WORD = "common_word"
    WORD_NUMBER = "word_number"
    CAPITALIZED_WORD = "capitalized_word"
    LEET_SPEAK = "leet_speak"
    WORD_SPECIAL = "word_special"
    NAME_YEAR = "name_year"
    CHARACTER_SUBSTITUTION = "character_substitution"
    POPULAR_PHRASE = "popular_phrase"
    SPORTS_TEAM = "sports_team"
    MOVIE_CHARACTER = "movie_character"


class HashAlgorithm(str, enum.Enum):
    """Hash algorithms simulated by the crack-time model."""

    BCRYPT = "bcrypt"
    SHA256 = "sha256"


class RiskLevel(str, enum.Enum):
    """Qualitative tier attached to a hackability score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# ===================================================================== #
#  Pattern Models
# ===================================================================== #


class DetectedPattern(_EngineModel):
    """A weak-password structure found by the pattern detector.

    Attributes:
        type: Pattern category.
        description: Human-readable label.
        confidence: Detection confidence in [0.0, 0.99].
        position: ``(start, end)`` character offsets; *end* is inclusive.
    """

    type: PatternType
    description: str
    confidence: float = Field(ge=0.0, le=0.99)
    position: tuple[int, int]


class CommonPatternResult(_EngineModel):
    """Result of the simple common-pattern rule table."""

    found: bool = False
    patterns: list[str] = Field(default_factory=list)


# ===================================================================== #
#  Crack Time and Scoring Models
# ===================================================================== #


class CrackEstimate(_EngineModel):
    """Time to brute-force a password for one algorithm/hardware pair.

    Attributes:
        algorithm: Simulated hash algorithm.
        hashes_per_second: Attacker speed.
        time_to_break: Human-readable duration.
        time_in_seconds: Raw duration (``inf`` when beyond float range;
            JSON output carries it as the string ``"Infinity"``).
    """

    algorithm: HashAlgorithm
    hashes_per_second: float
    time_to_break: str
    time_in_seconds: float


class AttackResistance(_EngineModel):
    """0-100 resistance against four attack families plus a weighted overall."""

    brute_force: int = Field(ge=0, le=100)
    dictionary: int = Field(ge=0, le=100)
    pattern_based: int = Field(ge=0, le=100)
    ai_attack: int = Field(ge=0, le=100)
    overall: int = Field(ge=0, le=100)


class HackabilityScore(_EngineModel):
    """0-100 real-world crackability estimate (higher is worse)."""

    score: int = Field(ge=0, le=100)
    reasoning: list[str] = Field(default_factory=list)
    time_to_hack: str
    risk_level: RiskLevel


# ===================================================================== #
#  Rewriter and Passphrase Models
# ===================================================================== #


class EnhancementResult(_EngineModel):
    """Outcome of rewriting a weak password.

    Attributes:
        original_password: The input password.
        enhanced_password: The rewritten variant (equal to the input on
            pass-through).
        improvements: One note per applied transformation.
        strength_increase: Sum of the per-step entropy estimates (bits).
    """

    original_password: str
    enhanced_password: str
    improvements: list[str] = Field(default_factory=list)
    strength_increase: float = 0.0


class PassphraseOptions(_EngineModel):
    """Options accepted by the passphrase generator."""

    word_count: StrictInt = Field(default=4, ge=2, le=12)
    add_number: StrictBool = True
    add_special: StrictBool = True
    capitalize_words: StrictBool = True


class MemorablePassphrase(_EngineModel):
    """A generated passphrase paired with a mnemonic hint."""

    passphrase: str
    hint: str = ""


# ===================================================================== #
#  Analysis Record
# ===================================================================== #


class PasswordAnalysis(_EngineModel):
    """Complete, immutable assessment of one password.

    Attributes:
        length: Number of characters.
        has_upper / has_lower / has_digit / has_special: Class coverage.
        is_common: Member of the known-leaked password list.
        has_common_pattern: At least one simple common-pattern rule matched.
        common_patterns: Labels of the matched simple rules, in rule order.
        ml_patterns: Structural patterns with confidences.
        entropy: Pattern-discounted entropy in bits.
        score: Final 0-4 grade.
        crack_time_estimates: Per algorithm/hardware crack estimates.
        time_to_crack: Simplified three-scenario view.
        suggestions: Improvement advice, most basic first.
        ai_enhanced: Rewritten stronger variant.
        attack_resistance: Four resistance sub-scores and overall.
        hackability_score: Composite crackability with risk tier.
        passphrase_suggestions: Unrelated generated alternatives.
    """

    length: int = 0
    has_upper: bool = False
    has_lower: bool = False
    has_digit: bool = False
    has_special: bool = False
    is_common: bool = False
    has_common_pattern: bool = False
    common_patterns: list[str] = Field(default_factory=list)
    ml_patterns: list[DetectedPattern] = Field(default_factory=list)
    entropy: float = Field(default=0.0, ge=0.0)
    score: int = Field(default=0, ge=0, le=4)
    crack_time_estimates: dict[str, CrackEstimate] = Field(default_factory=dict)
    time_to_crack: dict[str, str] = Field(default_factory=dict)
    suggestions: list[str] = Field(default_factory=list)
    ai_enhanced: EnhancementResult
    attack_resistance: AttackResistance
    hackability_score: HackabilityScore
    passphrase_suggestions: list[str] = Field(default_factory=list)

    @property
    def charset_count(self) -> int:
        """Number of character classes present (0-4)."""
        return sum((self.has_upper, self.has_lower, self.has_digit, self.has_special))


# ===================================================================== #
#  Collaborator Payloads
# ===================================================================== #


class PatternSummary(_EngineModel):
    """Pattern view shared with the chat assistant (no offsets)."""

    type: PatternType
    confidence: float
    description: str


class ChatSummary(_EngineModel):
    """Read-only analysis summary forwarded to the chat assistant."""

    score: int
    length: int
    has_upper: bool
    has_lower: bool
    has_digit: bool
    has_special: bool
    common_patterns: list[str] = Field(default_factory=list)
    entropy: int
    time_to_crack: str
    attack_resistance: AttackResistance
    hackability_score: HackabilityScore
    is_common: bool
    has_common_pattern: bool
    ml_patterns: list[PatternSummary] = Field(default_factory=list)


class HistoryRecord(BaseModel):
    """Row stored by the analysis-history collaborator.

    Column names are snake_case to match the remote table. The raw
    password is never part of this record; *password_hash* is a one-way
    SHA-256 digest computed by the caller.
    """

    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[int, str]] = None
    user_id: str = ""
    password_hash: str = Field(..., min_length=64, max_length=64)
    score: int = Field(ge=0, le=4)
    length: int = Field(ge=0)
    has_upper: bool
    has_lower: bool
    has_digit: bool
    has_special: bool
    is_common: bool
    has_common_pattern: bool
    entropy: float = Field(ge=0.0)
    created_at: Optional[_dt.datetime] = None
