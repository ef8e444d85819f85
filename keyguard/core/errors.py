"""
Keyguard Exceptions
====================

The analysis core has a single failure mode: malformed caller input.
Collaborator (network) failures are reported separately through
:class:`shared.network.KeyguardHTTPError`.
"""

from __future__ import annotations


class KeyguardError(Exception):
    """Base class for all Keyguard errors."""


class InvalidInputError(KeyguardError, ValueError):
    """A caller passed a non-string password or out-of-range options."""


class MessageTooLongError(InvalidInputError):
    """A chat message exceeds the configured maximum length."""

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(
            f"Message is too long ({length} characters, max {limit})"
        )
        self.length = length
        self.limit = limit


class CollaboratorConfigError(KeyguardError):
    """A remote collaborator is missing its endpoint or credentials."""
