"""Allow ``python -m mongo_compare_indexes``."""

from mongo_compare_indexes.interfaces.cli.cli import run

run()
