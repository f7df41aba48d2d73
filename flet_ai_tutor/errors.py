"""
Error types raised by the tutor's adapters.
"""

from typing import Optional


class TutorError(Exception):
    """Base class for tutor errors."""


class StoreError(TutorError):
    """A read or write against a hosted store failed.

    Covers network, auth and constraint failures alike.
    """

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        super().__init__(message or f"Store operation '{operation}' failed")


class DocumentError(TutorError):
    """A PDF could not be opened or read."""


class ChatError(TutorError):
    """The chat completion request failed."""


class ConfigError(TutorError):
    """A required setting is missing or invalid."""
