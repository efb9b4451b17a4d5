"""
Input validation errors for the reputation hash-chain core.

Every error raised by this package derives from :class:`ReputationError`,
which is a ``ValueError`` so callers that only care about "bad input" can
catch the builtin. A detected digest mismatch is never an exception; it is
reported through ``ReplayResult.valid``.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "ReputationError",
    "InvalidLength",
    "InvalidRange",
    "EventDecodeError",
    "ConfigError",
]


class ReputationError(ValueError):
    """Base class for all reputation core errors."""


class InvalidLength(ReputationError):
    """Raised when a fixed-length field has the wrong size or a bounded field is too long."""

    def __init__(self, field: str, expected: Any, actual: int, message: Optional[str] = None):
        self.field = field
        self.expected = expected
        self.actual = actual
        if message is None:
            message = f"{field} must be {expected} bytes (got {actual})"
        super().__init__(message)


class InvalidRange(ReputationError):
    """Raised when a numeric field falls outside its declared range."""

    def __init__(self, field: str, expected: Any, actual: Any, message: Optional[str] = None):
        self.field = field
        self.expected = expected
        self.actual = actual
        if message is None:
            message = f"{field} must be {expected} (got {actual!r})"
        super().__init__(message)


class EventDecodeError(ReputationError):
    """Raised when an indexer record cannot be turned into a replay event."""

    def __init__(self, position: int, key: str, reason: str):
        self.position = position
        self.key = key
        self.reason = reason
        super().__init__(f"record {position}: {key}: {reason}")


class ConfigError(ReputationError):
    """Raised when a configuration file or variable is malformed."""
