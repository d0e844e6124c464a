"""Print the index snapshot of the source database."""

import asyncio

from mongo_compare_indexes.comparison.collector import collect_snapshot
from mongo_compare_indexes.config.settings import load_settings
from mongo_compare_indexes.integrations.mongodb.connection import open_connection


async def main():
    settings = load_settings()

    async with open_connection(settings.source_mongo_url, settings, label="source") as conn:
        snapshot = await collect_snapshot(
            conn.db,
            label="source",
            max_concurrency=settings.compare_max_concurrency,
            include_system_collections=settings.compare_include_system_collections,
        )

    print(f"Collections: {sorted(snapshot.collections)}")
    for identity in sorted(snapshot):
        print(f"  - {identity.collection}.{identity.index_name} keys={snapshot[identity]}")


if __name__ == "__main__":
    asyncio.run(main())
