"""Main CLI application."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import typer
from typing_extensions import Annotated

from ..core.errors import ManifestError, SqlloomError
from ..core.settings import get_settings
from ..manifest import Metadata, load_metadata
from ..pipeline import coverage as cov
from ..pipeline import orchestrator
from ..rendering.io import Status
from . import report
from .parsers import parse_fail_under, resolve_manifest

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="sqlloom",
    help="Render SQL queries and their tests from Jinja2 templates.",
    no_args_is_help=True,
)


@dataclass(frozen=True)
class CliState:
    manifest: Path


@app.callback()
def main_callback(
    ctx: typer.Context,
    manifest: Annotated[
        str,
        typer.Option(
            "--manifest",
            "-m",
            help="Manifest file (default: sqlloom.toml, or $SQLLOOM_MANIFEST_PATH).",
            metavar="FILE",
        ),
    ] = "",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Render SQL queries and their tests from Jinja2 templates."""
    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if verbose or get_settings().verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    ctx.obj = CliState(manifest=resolve_manifest(manifest))


def _load(ctx: typer.Context) -> Metadata:
    """Load and validate the manifest, exiting with 1 on any mistake."""
    manifest = ctx.obj.manifest
    try:
        metadata = load_metadata(manifest)
    except ManifestError as e:
        report.print_mistakes(manifest, e.mistakes)
        raise typer.Exit(code=1) from e

    mistakes = metadata.validate()
    if mistakes:
        report.print_mistakes(manifest, mistakes)
        raise typer.Exit(code=1)
    return metadata


@contextmanager
def _fatal_errors() -> Iterator[None]:
    """Report render and I/O failures as a single message, exiting with 2."""
    try:
        yield
    except SqlloomError as e:
        logger.debug("Fatal error", exc_info=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2) from e


@app.command()
def validate(ctx: typer.Context) -> None:
    """Check the manifest and list every mistake found."""
    _load(ctx)
    typer.echo(f"All Ok: Manifest file '{ctx.obj.manifest}' is valid")


@app.command()
def render(ctx: typer.Context) -> None:
    """Render all queries and tests, writing them to the output directories."""
    metadata = _load(ctx)
    with _fatal_errors():
        outputs = orchestrator.render_all(metadata)
    logger.debug(f"Completed: {len(outputs)} file(s) rendered")


@app.command()
def status(
    ctx: typer.Context,
    assert_no_changes: Annotated[
        bool,
        typer.Option(
            "--assert-no-changes",
            help="Exit with status 1 unless every output is unchanged.",
        ),
    ] = False,
) -> None:
    """Show which outputs are new, changed or unchanged without writing."""
    metadata = _load(ctx)

    def show(kind: str, path: Path, stat: Status) -> None:
        if kind == "query":
            typer.echo(f"Query: {stat.label()}: {path}")
        else:
            typer.echo(f"  Test: {stat.label()}: {path}")

    with _fatal_errors():
        stats = orchestrator.status_all(metadata, on_item=show)

    if assert_no_changes and not orchestrator.no_changes(stats):
        raise typer.Exit(code=1)


@app.command()
def summary(ctx: typer.Context) -> None:
    """List queries with their templates, outputs and test outputs."""
    metadata = _load(ctx)
    report.console.print(report.summary_table(metadata))


@app.command()
def coverage(
    ctx: typer.Context,
    fail_under: Annotated[
        str,
        typer.Option(
            "--fail-under",
            help="Exit with status 1 if coverage is below this percentage (0-100).",
            metavar="PERCENT",
        ),
    ] = "",
) -> None:
    """Report which queries have at least one test."""
    threshold = parse_fail_under(fail_under)
    metadata = _load(ctx)

    result = cov.compute_coverage(metadata.queries, metadata.test_templates)
    report.console.print(report.coverage_table(result))

    if result.fails_under(threshold):
        raise typer.Exit(code=1)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
