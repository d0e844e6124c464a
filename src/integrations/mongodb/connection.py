"""
Scoped async MongoDB connection.

Wraps ``AsyncMongoClient`` so that a connection is verified on entry and
always closed on exit, whatever happens in between.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import ConfigurationError as MongoConfigurationError
from pymongo.errors import InvalidURI, PyMongoError

from mongo_compare_indexes.comparison.exceptions import ConnectivityError
from mongo_compare_indexes.config.exceptions import ConfigurationError
from mongo_compare_indexes.config.settings import Settings, validate_mongo_url

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


class MongoConnection:
    """
    One verified connection to one database.

    Usage:
        async with MongoConnection(url, settings, label="source") as conn:
            snapshot = await collector.collect(conn.db)
    """

    def __init__(
        self,
        url: str,
        settings: Settings,
        label: str = "database",
        client_factory: Optional[ClientFactory] = None,
        **client_options: Any,
    ):
        """
        Initialize the connection (nothing is opened until connect()).

        Args:
            url: MongoDB connection string
            settings: Settings providing timeouts and the default database
            label: Side name used in log lines and errors
            client_factory: Client constructor, AsyncMongoClient by default
            **client_options: Extra driver options, override settings-derived ones
        """
        self.url = validate_mongo_url(url, label)
        self.settings = settings
        self.label = label
        self._client_factory = client_factory or AsyncMongoClient
        self._client_options = client_options
        self._client: Optional[Any] = None
        self._db: Optional[Any] = None

    def driver_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "serverSelectionTimeoutMS": self.settings.mongo_server_selection_timeout_ms,
            "timeoutMS": self.settings.mongo_timeout_ms,
            "appname": "mongo-compare-indexes",
        }
        options.update(self._client_options)
        return options

    async def connect(self) -> None:
        """
        Create the client, ping the server and resolve the database.

        Raises:
            ConfigurationError: If the driver rejects the connection string
            ConnectivityError: If the server cannot be reached
        """
        try:
            self._client = self._client_factory(self.url, **self.driver_options())
        except (InvalidURI, MongoConfigurationError) as e:
            raise ConfigurationError(
                f"Invalid {self.label} connection string: {e}", original_error=e
            ) from e

        try:
            await self._client.admin.command("ping")
            self._db = self._client.get_default_database(
                default=self.settings.mongo_default_database
            )
        except (PyMongoError, OSError) as e:
            logger.error("mongodb_connection_failed side=%s error=%s", self.label, str(e))
            await self.close()
            raise ConnectivityError(
                f"Failed to connect to {self.label} MongoDB server: {e}", original_error=e
            ) from e

        logger.info(
            "Connected successfully to %s MongoDB server (database=%s)",
            self.label,
            self._db.name,
        )

    async def close(self) -> None:
        """Close the client if one was created."""
        if self._client is None:
            return
        client, self._client, self._db = self._client, None, None
        try:
            await client.close()
        except PyMongoError as e:
            logger.warning("Error closing %s connection: %s", self.label, e)
        else:
            logger.info("%s connection closed", self.label)

    @property
    def db(self) -> Any:
        """
        Get the database handle.

        Raises:
            RuntimeError: If not connected
        """
        if self._db is None:
            raise RuntimeError("MongoDB connection not open. Call connect() first.")
        return self._db

    async def __aenter__(self) -> "MongoConnection":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def open_connection(
    url: str,
    settings: Settings,
    label: str = "database",
    client_factory: Optional[ClientFactory] = None,
    **client_options: Any,
) -> MongoConnection:
    """Return an unopened MongoConnection for use with ``async with``."""
    return MongoConnection(
        url, settings, label=label, client_factory=client_factory, **client_options
    )


__all__ = ["ClientFactory", "MongoConnection", "open_connection"]
