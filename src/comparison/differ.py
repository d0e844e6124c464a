"""Set difference of two index snapshots."""

from __future__ import annotations

import logging
from typing import Optional

from mongo_compare_indexes.comparison.models import (
    DivergentIndexRecord,
    IndexDiff,
    IndexSnapshot,
    MissingIndexRecord,
)

ID_INDEX_NAME = "_id_"


def diff(
    source: IndexSnapshot,
    target: IndexSnapshot,
    *,
    detect_divergent: bool = True,
    logger: Optional[logging.Logger] = None,
) -> IndexDiff:
    """
    Compare two snapshots by index identity.

    Args:
        source: Snapshot of the source database
        target: Snapshot of the target database
        detect_divergent: Also report identities present on both sides whose
            key shapes differ
        logger: Optional logger receiving one debug line per difference

    Returns:
        IndexDiff whose lists follow the iteration order of the snapshot each
        record was taken from
    """
    missing_in_source = []
    for identity, definition in target.items():
        if identity not in source:
            missing_in_source.append(MissingIndexRecord.from_entry(identity, definition))
            if logger:
                logger.debug("Missing in source: %s", identity)

    missing_in_target = []
    divergent = []
    for identity, definition in source.items():
        other = target.get(identity)
        if other is None:
            missing_in_target.append(MissingIndexRecord.from_entry(identity, definition))
            if logger:
                logger.debug("Missing in target: %s", identity)
        elif detect_divergent and other != definition:
            divergent.append(
                DivergentIndexRecord(
                    collection=identity.collection,
                    index_name=identity.index_name,
                    source_value=definition.as_dict(),
                    target_value=other.as_dict(),
                )
            )
            if logger:
                logger.debug("Divergent: %s source=%s target=%s", identity, definition, other)

    return IndexDiff(
        missing_in_source=missing_in_source,
        missing_in_target=missing_in_target,
        divergent=divergent,
    )


def skip_missing_collections(
    result: IndexDiff, source: IndexSnapshot, target: IndexSnapshot
) -> IndexDiff:
    """
    Drop ``_id_`` records of collections that are absent on the other side.

    Every collection carries an ``_id_`` index, so for a collection missing
    altogether that record only restates the missing collection.
    """
    return IndexDiff(
        missing_in_source=[
            record
            for record in result.missing_in_source
            if not (record.index_name == ID_INDEX_NAME and record.collection not in source.collections)
        ],
        missing_in_target=[
            record
            for record in result.missing_in_target
            if not (record.index_name == ID_INDEX_NAME and record.collection not in target.collections)
        ],
        divergent=list(result.divergent),
    )


__all__ = ["ID_INDEX_NAME", "diff", "skip_missing_collections"]
