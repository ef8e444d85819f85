"""
Keyguard Analyzers
===================

Individual components of the password analysis engine. Each analyzer
covers one facet of the assessment; :class:`PasswordAnalyzer` runs them
all and assembles the final record.
"""

from keyguard.analyzers.common_patterns import match_common_patterns
from keyguard.analyzers.crack_time import estimate_crack_time, format_crack_time
from keyguard.analyzers.enhancer import PasswordEnhancer, enhance_password
from keyguard.analyzers.entropy import calculate_entropy, character_classes
from keyguard.analyzers.hackability import calculate_hackability_score
from keyguard.analyzers.passphrase import (
    PassphraseGenerator,
    calculate_passphrase_strength,
    generate_passphrase,
    generate_passphrase_suggestions,
    get_memorable_passphrases,
)
from keyguard.analyzers.password_analyzer import PasswordAnalyzer, analyze_password
from keyguard.analyzers.pattern_detector import PatternDetector, detect_patterns
from keyguard.analyzers.resistance import calculate_attack_resistance

__all__ = [
    "PassphraseGenerator",
    "PasswordAnalyzer",
    "PasswordEnhancer",
    "PatternDetector",
    "analyze_password",
    "calculate_attack_resistance",
    "calculate_entropy",
    "calculate_hackability_score",
    "calculate_passphrase_strength",
    "character_classes",
    "detect_patterns",
    "enhance_password",
    "estimate_crack_time",
    "format_crack_time",
    "generate_passphrase",
    "generate_passphrase_suggestions",
    "get_memorable_passphrases",
    "match_common_patterns",
]
