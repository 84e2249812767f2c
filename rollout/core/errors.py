"""Shared error codes and exceptions for the rollout core.

Storage failures are not wrapped here; they propagate from the adapter
unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"  # Legacy serialized payloads
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"  # Invalid settings / backend


class RolloutError(Exception):
    """Base class for errors raised by the rollout core."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class UnsupportedLegacyFormat(RolloutError):
    """Stored feature uses the legacy data payload in its 4th field."""

    code = ErrorCode.UNSUPPORTED_FORMAT

    def __init__(self, feature: str, raw: str):
        super().__init__(
            f"Serialized data for feature '{feature}' includes a legacy data payload"
        )
        self.feature = feature
        self.raw = raw


class ConfigurationError(RolloutError):
    code = ErrorCode.CONFIGURATION_ERROR


__all__ = ["ErrorCode", "RolloutError", "UnsupportedLegacyFormat", "ConfigurationError"]
