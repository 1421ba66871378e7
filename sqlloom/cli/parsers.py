"""CLI argument parsers and validators."""

from __future__ import annotations

from pathlib import Path

import typer

from ..core.settings import get_settings
from ..pipeline.coverage import parse_threshold


def parse_fail_under(value: str) -> int | None:
    """Parse the --fail-under threshold; empty means no threshold."""
    if not value:
        return None
    try:
        return parse_threshold(value)
    except ValueError as e:
        raise typer.BadParameter(f"{e}: {value!r}", param_hint="--fail-under") from e


def resolve_manifest(value: str) -> Path:
    """Resolve the manifest path from the CLI flag or SQLLOOM_MANIFEST_PATH."""
    if value:
        return Path(value)
    return get_settings().manifest_path
