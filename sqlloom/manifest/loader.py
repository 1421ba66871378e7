"""Manifest loading and validation."""

from __future__ import annotations

import logging
import tomllib
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeVar

from .._utils import missing_commands
from ..core.errors import DecodeError, DuplicateQueryId, ManifestError, Mistake
from ..core.models import (
    Placeholder,
    Queries,
    Query,
    QueryTemplate,
    TestTemplate,
    TestTemplates,
)
from ..rendering.formatter import Formatter, PgFormatter
from .decode import (
    decode_array_of_tables,
    decode_path,
    decode_string,
    decode_strlist,
    decode_table,
    require,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DIR_KEYS = (
    "query_templates_dir",
    "test_templates_dir",
    "queries_output_dir",
    "tests_output_dir",
)


@dataclass(frozen=True)
class Metadata:
    """A decoded manifest."""

    placeholder: Placeholder
    query_templates_dir: Path
    test_templates_dir: Path
    queries_output_dir: Path
    tests_output_dir: Path
    queries: Queries
    test_templates: TestTemplates
    query_templates: dict[Path, QueryTemplate] = field(default_factory=dict)
    formatter: Formatter | None = None
    path: Path | None = None

    def output_roots(self) -> tuple[Path, Path]:
        return self.queries_output_dir, self.tests_output_dir

    def validate(self) -> list[Mistake]:
        """Return every semantic problem with this manifest."""
        mistakes: list[Mistake] = []

        for tt in self.test_templates:
            if tt.query_id not in self.queries:
                mistakes.append(
                    Mistake(
                        kind="unknown_query",
                        subject=str(tt.path),
                        message=f"test template refers to unknown query '{tt.query_id}'",
                    )
                )
            if not tt.path.is_file():
                mistakes.append(
                    Mistake(
                        kind="missing_template",
                        subject=str(tt.path),
                        message="test template file not found",
                    )
                )
            if not _is_within(tt.output, self.tests_output_dir):
                mistakes.append(
                    Mistake(
                        kind="output_outside_root",
                        subject=str(tt.output),
                        message=f"test output must be inside {self.tests_output_dir}",
                    )
                )

        for query in self.queries:
            if not query.template.is_file():
                mistakes.append(
                    Mistake(
                        kind="missing_template",
                        subject=query.id,
                        message=f"query template not found: {query.template}",
                    )
                )
            declared = self.query_templates.get(query.template)
            if declared is not None:
                unknown = [c for c in query.conds if c not in declared.all_conds]
                if unknown:
                    mistakes.append(
                        Mistake(
                            kind="unknown_cond",
                            subject=query.id,
                            message=(
                                f"conds {unknown} are not declared in all_conds "
                                f"of {query.template}"
                            ),
                        )
                    )
            if query.output is not None and not _is_within(
                query.output, self.queries_output_dir
            ):
                mistakes.append(
                    Mistake(
                        kind="output_outside_root",
                        subject=query.id,
                        message=f"query output must be inside {self.queries_output_dir}",
                    )
                )

        outputs = [q.output for q in self.queries if q.output is not None]
        outputs += [tt.output for tt in self.test_templates]
        for output, count in Counter(p.resolve() for p in outputs).items():
            if count > 1:
                mistakes.append(
                    Mistake(
                        kind="duplicate_output",
                        subject=str(output),
                        message=f"{count} items write to the same output file",
                    )
                )

        if self.formatter is not None:
            for name in missing_commands(self.formatter.executables()):
                mistakes.append(
                    Mistake(
                        kind="formatter",
                        subject=self.formatter.name,
                        message=f"executable not found: {name}",
                    )
                )

        return mistakes


def _is_within(path: Path, root: Path) -> bool:
    return path.resolve().is_relative_to(root.resolve())


def _strip_j2(name: str) -> str:
    return name[: -len(".j2")] if name.endswith(".j2") else name


def load_metadata(path: Path) -> Metadata:
    """Read and decode a manifest file.

    Args:
        path: Path to the manifest file

    Returns:
        Decoded manifest, with relative paths resolved against its directory

    Raises:
        ManifestError: If the file is unreadable or has any decoding mistake
    """
    logger.debug(f"Loading manifest: {path}")
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestError(
            [
                Mistake(
                    kind="manifest",
                    subject=str(path),
                    message=f"cannot read manifest: {exc.strerror or exc}",
                )
            ]
        ) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ManifestError(
            [Mistake(kind="manifest", subject=str(path), message=f"invalid TOML: {exc}")]
        ) from exc

    return decode_metadata(raw, path.parent, path=path)


def decode_metadata(
    raw: dict[str, Any], base_dir: Path, path: Path | None = None
) -> Metadata:
    """Decode a parsed TOML document, collecting every mistake before failing."""
    mistakes: list[Mistake] = []

    def attempt(subject: str | None, fn: Callable[[], T], default: T) -> T:
        try:
            return fn()
        except DecodeError as exc:
            mistakes.append(Mistake(kind="decode", subject=subject, message=str(exc)))
            return default

    placeholder = attempt(
        None, lambda: _decode_placeholder(require(raw, "placeholder", "manifest")), None
    )

    dirs: dict[str, Path] = {}
    for key in _DIR_KEYS:
        dirs[key] = attempt(
            None,
            lambda key=key: decode_path(key, require(raw, key, "manifest"), base_dir),
            base_dir,
        )

    formatter = None
    if "formatter" in raw:
        formatter = attempt(
            "formatter", lambda: _decode_formatter(raw["formatter"], base_dir), None
        )

    query_templates: dict[Path, QueryTemplate] = {}
    entries = attempt(
        None,
        lambda: decode_array_of_tables("query_templates", raw.get("query_templates", [])),
        [],
    )
    for i, entry in enumerate(entries):
        qt = attempt(
            f"query_templates[{i}]",
            lambda entry=entry: _decode_query_template(entry, dirs["query_templates_dir"]),
            None,
        )
        if qt is None:
            continue
        if qt.path in query_templates:
            mistakes.append(
                Mistake(
                    kind="duplicate_template",
                    subject=str(qt.path),
                    message="query template declared more than once",
                )
            )
            continue
        query_templates[qt.path] = qt

    queries = Queries()
    entries = attempt(
        None, lambda: decode_array_of_tables("queries", require(raw, "queries", "manifest")), []
    )
    for i, entry in enumerate(entries):
        query = attempt(
            f"queries[{i}]",
            lambda entry=entry: _decode_query(
                entry, dirs["query_templates_dir"], dirs["queries_output_dir"]
            ),
            None,
        )
        if query is None:
            continue
        try:
            queries.add(query)
        except DuplicateQueryId as exc:
            mistakes.append(
                Mistake(kind="duplicate_query", subject=query.id, message=str(exc))
            )

    test_templates = TestTemplates()
    entries = attempt(
        None,
        lambda: decode_array_of_tables("test_templates", raw.get("test_templates", [])),
        [],
    )
    for i, entry in enumerate(entries):
        tt = attempt(
            f"test_templates[{i}]",
            lambda entry=entry: _decode_test_template(
                entry, dirs["test_templates_dir"], dirs["tests_output_dir"]
            ),
            None,
        )
        if tt is not None:
            test_templates.add(tt)

    if mistakes:
        raise ManifestError(mistakes)

    logger.debug(
        f"Decoded manifest: {len(queries)} query(ies), {len(test_templates)} test template(s)"
    )
    return Metadata(
        placeholder=placeholder,
        queries=queries,
        test_templates=test_templates,
        query_templates=query_templates,
        formatter=formatter,
        path=path,
        **dirs,
    )


def _decode_placeholder(value: Any) -> Placeholder:
    name = decode_string("placeholder", value)
    try:
        return Placeholder(name.lower())
    except ValueError:
        choices = ", ".join(p.value for p in Placeholder)
        raise DecodeError("placeholder", f"must be one of {choices}, got {name!r}") from None


def _decode_formatter(value: Any, base_dir: Path) -> Formatter | None:
    table = decode_table("formatter", value)
    if not table:
        return None
    unknown = sorted(set(table) - {"pgFormatter"})
    if unknown:
        raise DecodeError("formatter", f"unsupported formatter(s): {', '.join(unknown)}")
    pg = decode_table("formatter.pgFormatter", table["pgFormatter"])
    exec_path = decode_string("exec_path", pg.get("exec_path", "pg_format"))
    conf_path = None
    if "conf_path" in pg:
        conf_path = decode_path("conf_path", pg["conf_path"], base_dir)
    return PgFormatter(exec_path=exec_path, conf_path=conf_path)


def _decode_query_template(entry: dict[str, Any], templates_dir: Path) -> QueryTemplate:
    path = decode_path("path", require(entry, "path", "query_templates"), templates_dir)
    all_conds = decode_strlist("all_conds", entry.get("all_conds", []))
    return QueryTemplate(path=path, all_conds=tuple(all_conds))


def _decode_query(entry: dict[str, Any], templates_dir: Path, output_dir: Path) -> Query:
    query_id = decode_string("id", require(entry, "id", "queries"))
    if not query_id:
        raise DecodeError("id", "must not be empty")
    template = decode_path("template", require(entry, "template", "queries"), templates_dir)
    conds = decode_strlist("conds", entry.get("conds", []))
    output = None
    if "output" in entry:
        output = decode_path("output", entry["output"], output_dir)
    return Query(id=query_id, template=template, conds=tuple(conds), output=output)


def _decode_test_template(
    entry: dict[str, Any], templates_dir: Path, output_dir: Path
) -> TestTemplate:
    query_id = decode_string("query", require(entry, "query", "test_templates"))
    path = decode_path("path", require(entry, "path", "test_templates"), templates_dir)
    if "output" in entry:
        output = decode_path("output", entry["output"], output_dir)
    else:
        output = output_dir / _strip_j2(path.name)
    return TestTemplate(path=path, output=output, query_id=query_id)
