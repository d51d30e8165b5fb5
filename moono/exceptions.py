"""
Error taxonomy for the progression engine.

Every error carries a human-readable message plus optional context that is
forwarded to structured logging.
"""

from typing import Any, Dict, Optional


class MoonoError(Exception):
    """Base class for all progression engine errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class LoadError(MoonoError):
    """Content fetch failed. Callers may retry the load."""


class UnknownStepTypeError(LoadError):
    """A lesson step row carries a type tag outside the supported set."""


class IdentityError(MoonoError):
    """No authenticated user is available when one is required."""


class PersistenceError(MoonoError):
    """A completion fact could not be read or written."""


class PlaybackError(MoonoError):
    """Audio resource is missing or the transport failed."""


class ConfigurationError(MoonoError):
    """Step content is present but cannot be evaluated (e.g. quiz without answer)."""
