"""
Keyguard -- Password Analysis Engine
=====================================

Analyses a password and produces a multi-faceted assessment: character
class coverage, pattern-discounted entropy, weak-pattern detection,
simulated crack times, attack-resistance and hackability scores, a 0-4
strength grade, and improvement suggestions including a rewritten
variant and generated passphrases.

Modules:
    - keyguard.analyzers: The analysis engine components
    - keyguard.core.engine: Facade used by the CLI
    - keyguard.core.models: Pydantic data models
    - keyguard.integrations: Chat assistant and analysis history clients
    - keyguard.output: Console and report output
    - keyguard.cli: Click-based command-line interface

Usage::

    import keyguard

    analysis = keyguard.analyze("Tr0ub4dor&3")
    print(analysis.score, analysis.entropy)

References:
    - NIST SP 800-63B (2017). Digital Identity Guidelines.
    - Bonneau, J. (2012). The Science of Guessing. IEEE S&P.
"""

from __future__ import annotations

import random
from typing import Optional

from keyguard.analyzers.enhancer import enhance_password
from keyguard.analyzers.passphrase import (
    generate_passphrase,
    generate_passphrase_suggestions,
)
from keyguard.analyzers.password_analyzer import analyze_password
from keyguard.core.models import EnhancementResult, PasswordAnalysis

__version__ = "1.0.0"
__tool_name__ = "keyguard"


def analyze(password: str, rng: Optional[random.Random] = None) -> PasswordAnalysis:
    """Analyse *password* and return the full assessment."""
    return analyze_password(password, rng)


def enhance(
    password: str, current_score: int, rng: Optional[random.Random] = None
) -> EnhancementResult:
    """Rewrite *password* into a stronger variant unless it scores 4."""
    return enhance_password(password, current_score, rng)


__all__ = [
    "__version__",
    "analyze",
    "enhance",
    "generate_passphrase",
    "generate_passphrase_suggestions",
]
