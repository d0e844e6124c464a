"""Config-specific exceptions."""

from __future__ import annotations

from mongo_compare_indexes.core.exceptions import IndexCompareException


class ConfigurationError(IndexCompareException):
    """Raised when a connection endpoint is missing or malformed, or settings are invalid."""

    pass


__all__ = ["ConfigurationError"]
