"""Shared fixtures: a small sqlloom project on disk."""

from __future__ import annotations

from pathlib import Path

import pytest

from sqlloom.manifest import Metadata, load_metadata

MANIFEST = """\
placeholder = "{placeholder}"
query_templates_dir = "templates/queries"
test_templates_dir = "templates/tests"
queries_output_dir = "output/queries"
tests_output_dir = "output/tests"

[[query_templates]]
path = "songs.sql.j2"
all_conds = ["genre"]

[[queries]]
id = "songs"
template = "songs.sql.j2"
conds = []
output = "songs.sql"

[[queries]]
id = "songs_by_genre"
template = "songs.sql.j2"
conds = ["genre"]
output = "songs_by_genre.sql"

[[test_templates]]
query = "songs_by_genre"
path = "songs_by_genre_test.sql.j2"
"""

QUERY_TEMPLATE = """\
SELECT id, title
FROM songs
{% if cond__genre %}
WHERE genre = $1
{% endif %}
ORDER BY id;
"""

POSARGS_TEST_TEMPLATE = """\
PREPARE songs_by_genre AS
{{ prepared_statement }}
EXECUTE songs_by_genre('rock');
"""

VARIABLES_TEST_TEMPLATE = """\
-- {{ placeholder }}
SELECT count(*) FROM songs WHERE genre = :'genre';
"""


def make_project(
    root: Path,
    *,
    placeholder: str = "posargs",
    manifest: str | None = None,
    test_template: str | None = None,
) -> Path:
    """Write templates and a manifest under ``root`` and return the manifest path."""
    queries_dir = root / "templates" / "queries"
    tests_dir = root / "templates" / "tests"
    queries_dir.mkdir(parents=True, exist_ok=True)
    tests_dir.mkdir(parents=True, exist_ok=True)

    (queries_dir / "songs.sql.j2").write_text(QUERY_TEMPLATE)
    if test_template is None:
        test_template = (
            POSARGS_TEST_TEMPLATE if placeholder == "posargs" else VARIABLES_TEST_TEMPLATE
        )
    (tests_dir / "songs_by_genre_test.sql.j2").write_text(test_template)

    manifest_path = root / "sqlloom.toml"
    text = manifest if manifest is not None else MANIFEST.format(placeholder=placeholder)
    manifest_path.write_text(text)
    return manifest_path


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    return make_project(tmp_path)


@pytest.fixture
def metadata(manifest_path: Path) -> Metadata:
    return load_metadata(manifest_path)
