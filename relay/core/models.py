"""
Core enums shared across the relay.
"""

from enum import Enum


class ProviderClass(str, Enum):
    """Upstream class a model identifier is served by."""

    DEFAULT = "default"
    IMAGE_GEN = "image_gen"
    POOLED = "pooled"


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "validation_error"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    UPSTREAM_ERROR = "upstream_error"
    NORMALIZATION_FAILURE = "normalization_failure"
