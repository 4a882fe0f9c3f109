"""
Core package initialization.
"""

from relay.core.config import Settings, get_settings, settings
from relay.core.exceptions import ProviderChainError, RelayException, ValidationError
from relay.core.models import ErrorKind, ProviderClass

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "settings",
    # Enums
    "ErrorKind",
    "ProviderClass",
    # Exceptions
    "RelayException",
    "ValidationError",
    "ProviderChainError",
]
