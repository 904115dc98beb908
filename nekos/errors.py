# nekos/errors.py
"""
Error taxonomy for the selection engine.

All errors are raised synchronously to the immediate caller and are never
retried by the engine. The HTTP layer (nekos/main.py) maps each class to a
status code and error code.
"""

from __future__ import annotations

__all__ = ["NekosError", "ConfigurationError", "ValidationError", "IntentViolationError"]


class NekosError(Exception):
    """Base class for every error raised by the nekos package."""

    code = "NEKOS_ERROR"


class ConfigurationError(NekosError):
    """Intent already locked, unknown metadata field names, or a malformed metadata argument."""

    code = "CONFIGURATION_ERROR"


class ValidationError(NekosError):
    """Bad amount, unknown category name, or no category left after the type filter."""

    code = "VALIDATION_ERROR"


class IntentViolationError(NekosError):
    """Requested category is outside the locked intent's allowed set."""

    code = "INTENT_VIOLATION"
