"""Collect the index inventory of one database into an IndexSnapshot."""

from __future__ import annotations

import asyncio
import logging
import warnings
from collections.abc import Iterable
from typing import Any, Optional

from pymongo.errors import PyMongoError

from mongo_compare_indexes.comparison.exceptions import (
    ConnectivityError,
    IdentityCollisionWarning,
)
from mongo_compare_indexes.comparison.models import (
    IndexDefinition,
    IndexIdentity,
    IndexSnapshot,
)


COLLECTION_FILTER = {"type": "collection"}
SYSTEM_PREFIX = "system."

IndexEntry = tuple[IndexIdentity, IndexDefinition]


def is_system_collection(name: str) -> bool:
    return name.startswith(SYSTEM_PREFIX)


async def gather_or_cancel(*coros: Any) -> list[Any]:
    """Await all coroutines; if one fails, cancel the rest before re-raising."""
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class IndexSnapshotCollector:
    """
    Enumerate every collection and index of a database.

    Index listings for different collections run concurrently, bounded by
    ``max_concurrency``. Each listing returns its own list of entries and the
    lists are merged once all of them have finished, so the snapshot is built
    by a single writer.
    """

    def __init__(
        self,
        max_concurrency: int = 8,
        include_system_collections: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the collector.

        Args:
            max_concurrency: Maximum number of index listings in flight at once
            include_system_collections: Keep system.* collections in the snapshot
            logger: Logger to report progress to (defaults to the module logger)
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.max_concurrency = max_concurrency
        self.include_system_collections = include_system_collections
        self.logger = logger or logging.getLogger(__name__)

    async def collect(self, database: Any, label: str = "") -> IndexSnapshot:
        """
        Build the index snapshot of ``database``.

        Args:
            database: Async database handle (pymongo AsyncDatabase or compatible)
            label: Side name used in log lines ("source" / "target")

        Returns:
            Immutable snapshot of every index on every collection

        Raises:
            ConnectivityError: If collections or indexes cannot be enumerated
        """
        where = label or getattr(database, "name", "database")
        try:
            collection_names = await self.list_collection_names(database)
        except (PyMongoError, asyncio.TimeoutError, OSError) as e:
            raise ConnectivityError(
                f"Failed to list collections on {where}: {e}", original_error=e
            ) from e

        self.logger.info(
            "Listing indexes for %d collections on %s", len(collection_names), where
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)
        listings = await gather_or_cancel(
            *(self._bounded_listing(semaphore, database, name, where) for name in collection_names)
        )

        snapshot = self.merge(listings, collection_names, label=label)
        self.logger.info(
            "Collected %d indexes across %d collections on %s",
            len(snapshot),
            len(collection_names),
            where,
        )
        return snapshot

    async def list_collection_names(self, database: Any) -> list[str]:
        """List collection names, excluding views and (by default) system collections."""
        cursor = await database.list_collections(filter=COLLECTION_FILTER)
        documents = await cursor.to_list(None)
        names = []
        for doc in documents:
            # Older servers ignore the type filter
            if doc.get("type", "collection") != "collection":
                continue
            name = doc["name"]
            if not self.include_system_collections and is_system_collection(name):
                self.logger.debug("Skipping system collection %s", name)
                continue
            names.append(name)
        return names

    async def _bounded_listing(
        self, semaphore: asyncio.Semaphore, database: Any, collection_name: str, where: str
    ) -> list[IndexEntry]:
        async with semaphore:
            try:
                return await self.list_collection_indexes(database, collection_name, where)
            except (PyMongoError, asyncio.TimeoutError, OSError) as e:
                raise ConnectivityError(
                    f"Failed to list indexes of collection '{collection_name}' on {where}: {e}",
                    original_error=e,
                ) from e

    async def list_collection_indexes(
        self, database: Any, collection_name: str, where: str = ""
    ) -> list[IndexEntry]:
        """List the (identity, definition) pairs of one collection."""
        cursor = await database[collection_name].list_indexes()
        documents = await cursor.to_list(None)
        entries = []
        for doc in documents:
            name = doc.get("name")
            key = doc.get("key")
            if not name or not key:
                raise ConnectivityError(
                    f"Malformed index document on collection '{collection_name}': {dict(doc)!r}"
                )
            identity = IndexIdentity(collection_name, name)
            entries.append((identity, IndexDefinition.from_key(key)))
            self.logger.debug("%s: %s", where, identity)
        return entries

    def merge(
        self,
        listings: Iterable[Iterable[IndexEntry]],
        collection_names: Iterable[str] = (),
        label: str = "",
    ) -> IndexSnapshot:
        """Fold per-collection listings into one snapshot; last write wins on collision."""
        entries: dict[IndexIdentity, IndexDefinition] = {}
        for listing in listings:
            for identity, definition in listing:
                if identity in entries:
                    message = (
                        f"Duplicate index identity {identity} on {label or 'snapshot'}; "
                        "keeping the last definition"
                    )
                    self.logger.warning(message)
                    warnings.warn(message, IdentityCollisionWarning, stacklevel=2)
                entries[identity] = definition
        return IndexSnapshot(entries, collections=collection_names, label=label)


async def collect_snapshot(
    database: Any,
    label: str = "",
    *,
    max_concurrency: int = 8,
    include_system_collections: bool = False,
    logger: Optional[logging.Logger] = None,
) -> IndexSnapshot:
    """Convenience wrapper around IndexSnapshotCollector.collect."""
    collector = IndexSnapshotCollector(
        max_concurrency=max_concurrency,
        include_system_collections=include_system_collections,
        logger=logger,
    )
    return await collector.collect(database, label=label)


__all__ = [
    "COLLECTION_FILTER",
    "IndexSnapshotCollector",
    "collect_snapshot",
    "gather_or_cancel",
    "is_system_collection",
]
