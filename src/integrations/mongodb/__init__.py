"""MongoDB integration."""

from .connection import MongoConnection, open_connection

__all__ = ["MongoConnection", "open_connection"]
