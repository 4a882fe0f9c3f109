"""
Application exceptions.

Every exception carries a human-readable ``message`` and optional ``details``
(the raw upstream message, never a stack trace or credential).
"""

from typing import Any

from relay.core.models import ErrorKind


class RelayException(Exception):
    """Base class for all relay errors."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(RelayException):
    """Inbound request rejected before any upstream attempt."""

    code = ErrorKind.VALIDATION_ERROR


class ProviderChainError(RelayException):
    """Raised by the gateway when every attempt for a request failed."""

    def __init__(
        self,
        message: str,
        details: Any = None,
        error_kind: ErrorKind = ErrorKind.UPSTREAM_ERROR,
    ):
        super().__init__(message, details)
        self.error_kind = error_kind

    @property
    def code(self) -> ErrorKind:
        return self.error_kind
