"""Run a full source/target index comparison."""

from __future__ import annotations

import logging
import time
from contextlib import AsyncExitStack
from typing import Any, Optional

from mongo_compare_indexes.comparison.collector import IndexSnapshotCollector, gather_or_cancel
from mongo_compare_indexes.comparison.differ import diff, skip_missing_collections
from mongo_compare_indexes.comparison.models import ComparisonReport
from mongo_compare_indexes.config.settings import Settings, require_connection_urls
from mongo_compare_indexes.integrations.mongodb.connection import (
    ClientFactory,
    MongoConnection,
)


async def compare_indexes(
    source_url: str,
    target_url: str,
    settings: Settings,
    *,
    skip_missing: bool = False,
    client_factory: Optional[ClientFactory] = None,
    logger: Optional[logging.Logger] = None,
    **client_options: Any,
) -> ComparisonReport:
    """
    Compare the indexes of two databases.

    Both connections are opened before any enumeration starts and are closed
    on every exit path. The two snapshots are collected concurrently.

    Args:
        source_url: Connection string of the source database
        target_url: Connection string of the target database
        settings: Timeouts, concurrency and comparison switches
        skip_missing: Drop ``_id_`` records of collections missing on the other side
        client_factory: Client constructor, AsyncMongoClient by default
        logger: Logger for progress lines (defaults to the module logger)
        **client_options: Extra driver options

    Returns:
        ComparisonReport with a sorted IndexDiff

    Raises:
        ConfigurationError: If a connection string is missing or malformed
        ConnectivityError: If either database cannot be reached or enumerated
    """
    log = logger or logging.getLogger(__name__)
    source_url, target_url = require_connection_urls(source_url, target_url)
    started = time.perf_counter()

    collector = IndexSnapshotCollector(
        max_concurrency=settings.compare_max_concurrency,
        include_system_collections=settings.compare_include_system_collections,
        logger=log,
    )

    async with AsyncExitStack() as stack:
        source = await stack.enter_async_context(
            MongoConnection(
                source_url, settings, label="source", client_factory=client_factory, **client_options
            )
        )
        target = await stack.enter_async_context(
            MongoConnection(
                target_url, settings, label="target", client_factory=client_factory, **client_options
            )
        )
        source_snapshot, target_snapshot = await gather_or_cancel(
            collector.collect(source.db, label="source"),
            collector.collect(target.db, label="target"),
        )

    result = diff(
        source_snapshot,
        target_snapshot,
        detect_divergent=settings.compare_detect_divergent,
        logger=log,
    )
    if skip_missing:
        result = skip_missing_collections(result, source_snapshot, target_snapshot)

    elapsed_ms = (time.perf_counter() - started) * 1000
    log.info(
        "Index comparison found %d missing in source, %d missing in target, %d divergent",
        len(result.missing_in_source),
        len(result.missing_in_target),
        len(result.divergent),
    )
    return ComparisonReport(
        diff=result.sorted(),
        source_index_count=len(source_snapshot),
        target_index_count=len(target_snapshot),
        elapsed_ms=elapsed_ms,
    )


__all__ = ["compare_indexes"]
