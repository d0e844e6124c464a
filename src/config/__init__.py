"""Configuration module for MongoDB index comparison."""

from .exceptions import ConfigurationError
from .settings import Settings, load_settings, require_connection_urls, validate_mongo_url

__all__ = [
    "ConfigurationError",
    "Settings",
    "load_settings",
    "require_connection_urls",
    "validate_mongo_url",
]
