"""AI relay: provider dispatch and response normalization service."""

__version__ = "2.0.0"
