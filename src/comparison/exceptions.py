"""Comparison-specific exceptions and warnings."""

from __future__ import annotations

from mongo_compare_indexes.core.exceptions import IndexCompareException


class ConnectivityError(IndexCompareException):
    """Raised when connecting to a database or enumerating its indexes fails."""

    pass


class IdentityCollisionWarning(UserWarning):
    """Emitted when the same (collection, index name) is seen twice in one snapshot."""

    pass


__all__ = ["ConnectivityError", "IdentityCollisionWarning"]
