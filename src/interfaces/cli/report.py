"""Console rendering of comparison reports."""

from __future__ import annotations

import json
from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from mongo_compare_indexes.comparison.models import (
    ComparisonReport,
    DivergentIndexRecord,
    MissingIndexRecord,
)


def format_key(value: dict) -> str:
    """Render a key document compactly, keeping field order."""
    return json.dumps(value, separators=(", ", ": "))


def missing_table(title: str, records: Sequence[MissingIndexRecord]) -> Table:
    table = Table(title=title)
    table.add_column("collection", style="cyan")
    table.add_column("index_name", style="bold")
    table.add_column("index_value")
    for record in records:
        table.add_row(record.collection, record.index_name, format_key(record.index_value))
    return table


def divergent_table(records: Sequence[DivergentIndexRecord]) -> Table:
    table = Table(title="Divergent indexes")
    table.add_column("collection", style="cyan")
    table.add_column("index_name", style="bold")
    table.add_column("source_value")
    table.add_column("target_value")
    for record in records:
        table.add_row(
            record.collection,
            record.index_name,
            format_key(record.source_value),
            format_key(record.target_value),
        )
    return table


def render_table(console: Console, report: ComparisonReport) -> None:
    """Print both missing-index tables, their totals and any divergent indexes."""
    result = report.diff

    console.print(missing_table("Missing indexes in source", result.missing_in_source))
    console.print(f"Total missing indexes in source: {len(result.missing_in_source)}")
    console.print()

    console.print(missing_table("Missing indexes in target", result.missing_in_target))
    console.print(f"Total missing indexes in target: {len(result.missing_in_target)}")

    if result.divergent:
        console.print()
        console.print(divergent_table(result.divergent))
        console.print(f"Total divergent indexes: {len(result.divergent)}")

    console.print(
        f"[dim]Compared {report.source_index_count} source and "
        f"{report.target_index_count} target indexes in {report.elapsed_ms:.2f} ms[/dim]"
    )


def render_json(console: Console, report: ComparisonReport) -> None:
    console.print_json(report.model_dump_json())


RENDERERS = {
    "table": render_table,
    "json": render_json,
}


__all__ = ["RENDERERS", "format_key", "render_json", "render_table"]
