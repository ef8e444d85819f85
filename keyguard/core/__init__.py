"""
Keyguard Core Module
=====================

Data models and exceptions shared by the analyzers, the collaborators
and the CLI. The engine facade lives in :mod:`keyguard.core.engine`.
"""

from keyguard.core.errors import (
    CollaboratorConfigError,
    InvalidInputError,
    KeyguardError,
    MessageTooLongError,
)
from keyguard.core.models import (
    AttackResistance,
    ChatSummary,
    CommonPatternResult,
    CrackEstimate,
    DetectedPattern,
    EnhancementResult,
    HackabilityScore,
    HashAlgorithm,
    HistoryRecord,
    MemorablePassphrase,
    PassphraseOptions,
    PasswordAnalysis,
    PatternType,
    RiskLevel,
)

__all__ = [
    "AttackResistance",
    "ChatSummary",
    "CollaboratorConfigError",
    "CommonPatternResult",
    "CrackEstimate",
    "DetectedPattern",
    "EnhancementResult",
    "HackabilityScore",
    "HashAlgorithm",
    "HistoryRecord",
    "InvalidInputError",
    "KeyguardError",
    "MemorablePassphrase",
    "MessageTooLongError",
    "PassphraseOptions",
    "PasswordAnalysis",
    "PatternType",
    "RiskLevel",
]
