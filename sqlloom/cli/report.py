"""Rich tables for summary and coverage output."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..core.errors import Mistake
from ..manifest import Metadata
from ..pipeline.coverage import CoverageReport

console = Console()


def print_mistakes(manifest: Path, mistakes: list[Mistake]) -> None:
    typer.echo(f"Invalid manifest file: '{manifest}'")
    for mistake in mistakes:
        typer.echo(f"  {mistake.err_msg()}")


def summary_table(metadata: Metadata) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Id")
    table.add_column("Query")
    table.add_column("Template")
    table.add_column("Tests")

    for query in metadata.queries:
        tests = "\n".join(
            str(tt.output) for tt in metadata.test_templates.find_by_query(query.id)
        )
        table.add_row(
            query.id,
            str(query.output) if query.output is not None else "-",
            str(query.template),
            tests,
        )
    return table


def coverage_table(report: CoverageReport) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Query")
    table.add_column("Has tests?")

    for row in report.rows:
        table.add_row(row.query_id, f"Yes ({row.num_tests})" if row.has_tests else "No")

    if report.percent is None:
        total = "n/a\n(manifest has no queries)"
    else:
        total = (
            f"{report.percent:.2f}%\n"
            f"({report.num_tested}/{report.num_queries} queries have at least 1 test)"
        )
    table.add_row("Total", total)
    return table
