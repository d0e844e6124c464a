"""Index snapshot collection and comparison."""

from .collector import IndexSnapshotCollector, collect_snapshot
from .differ import diff, skip_missing_collections
from .exceptions import ConnectivityError, IdentityCollisionWarning
from .models import (
    ComparisonReport,
    DivergentIndexRecord,
    IndexDefinition,
    IndexDiff,
    IndexIdentity,
    IndexSnapshot,
    MissingIndexRecord,
)

__all__ = [
    "ComparisonReport",
    "ConnectivityError",
    "DivergentIndexRecord",
    "IdentityCollisionWarning",
    "IndexDefinition",
    "IndexDiff",
    "IndexIdentity",
    "IndexSnapshot",
    "IndexSnapshotCollector",
    "MissingIndexRecord",
    "collect_snapshot",
    "diff",
    "skip_missing_collections",
]
