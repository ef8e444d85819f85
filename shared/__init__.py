"""
Keyguard Shared Module
=======================

Configuration, logging, console theming, HTTP client and numeric helpers
shared by the Keyguard engine, its collaborators and the CLI.
"""

from shared.config import KeyguardConfig, get_config

__all__ = ["KeyguardConfig", "get_config"]
