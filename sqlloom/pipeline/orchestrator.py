"""Sequences rendering and reconciliation across all queries of a manifest."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Literal

from ..core.models import Placeholder
from ..manifest import Metadata
from ..rendering import io
from ..rendering.engine import Engine

logger = logging.getLogger(__name__)

ItemKind = Literal["query", "test"]
StatusCallback = Callable[[ItemKind, Path, io.Status], None]


def prepared_statement(placeholder: Placeholder, query_text: str) -> str | None:
    """Return the text threaded into test templates for this placeholder mode."""
    match placeholder:
        case Placeholder.POSARGS:
            return query_text
        case Placeholder.VARIABLES:
            return None
        case _:
            raise ValueError(f"Unsupported placeholder: {placeholder!r}")


def render_all(metadata: Metadata, engine: Engine | None = None) -> list[Path]:
    """Render every query and its tests, writing the results.

    Stops at the first failure. Files written before it are left in place.

    Returns:
        Written output paths, in rendering order
    """
    engine = engine or Engine.from_metadata(metadata)
    roots = metadata.output_roots()
    io.ensure_output_dirs(*roots)

    logger.info(f"Rendering {len(metadata.queries)} query(ies)")
    written: list[Path] = []
    for query in metadata.queries:
        query_output = engine.render_query(query.id)
        if query.output is not None:
            io.write(query.output, metadata.formatter, query_output, roots=roots)
            written.append(query.output)

        prep_stmt = prepared_statement(metadata.placeholder, query_output)
        for tt in metadata.test_templates.find_by_query(query.id):
            test_output = engine.render_test(tt.path, prep_stmt)
            io.write(tt.output, metadata.formatter, test_output, roots=roots)
            written.append(tt.output)

    logger.info(f"Successfully rendered {len(written)} file(s)")
    return written


def status_all(
    metadata: Metadata,
    engine: Engine | None = None,
    on_item: StatusCallback | None = None,
) -> dict[Path, io.Status]:
    """Render every query and its tests and classify them against disk.

    Nothing is written.
    """
    engine = engine or Engine.from_metadata(metadata)

    stats: dict[Path, io.Status] = {}
    for query in metadata.queries:
        query_output = engine.render_query(query.id)
        if query.output is not None:
            q_stat = io.status(query.output, metadata.formatter, query_output)
            stats[query.output] = q_stat
            if on_item is not None:
                on_item("query", query.output, q_stat)

        prep_stmt = prepared_statement(metadata.placeholder, query_output)
        for tt in metadata.test_templates.find_by_query(query.id):
            test_output = engine.render_test(tt.path, prep_stmt)
            t_stat = io.status(tt.output, metadata.formatter, test_output)
            stats[tt.output] = t_stat
            if on_item is not None:
                on_item("test", tt.output, t_stat)

    return stats


def no_changes(stats: dict[Path, io.Status]) -> bool:
    return all(s is io.Status.UNCHANGED for s in stats.values())
