"""Core module: logging and exceptions."""

from mongo_compare_indexes.core.exceptions import IndexCompareException
from mongo_compare_indexes.core.logging import configure_logging

__all__ = ["IndexCompareException", "configure_logging"]
