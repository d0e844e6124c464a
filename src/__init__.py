"""Compare index definitions between two MongoDB databases."""

__version__ = "1.1.0"
