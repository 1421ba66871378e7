"""CLI tests using Typer's test runner."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from sqlloom.cli import app

from .conftest import MANIFEST, make_project


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, manifest_path):
    def _invoke(*args: str):
        return runner.invoke(app, ["--manifest", str(manifest_path), *args])

    return _invoke


class TestValidate:
    def test_valid(self, invoke):
        result = invoke("validate")
        assert result.exit_code == 0
        assert "All Ok" in result.output

    def test_lists_every_mistake(self, runner, tmp_path):
        manifest = MANIFEST.format(placeholder="posargs")
        manifest += '\n[[queries]]\nid = "songs"\ntemplate = "songs.sql.j2"\n'
        manifest += '\n[[test_templates]]\nquery = 7\npath = "x.sql.j2"\n'
        path = make_project(tmp_path, manifest=manifest)

        result = runner.invoke(app, ["--manifest", str(path), "validate"])
        assert result.exit_code == 1
        assert "Invalid manifest file" in result.output
        assert "duplicate_query" in result.output
        assert "test_templates[1]" in result.output

    def test_semantic_mistakes(self, runner, tmp_path):
        manifest = MANIFEST.format(placeholder="posargs").replace(
            'query = "songs_by_genre"', 'query = "albums"'
        )
        path = make_project(tmp_path, manifest=manifest)
        result = runner.invoke(app, ["--manifest", str(path), "render"])
        assert result.exit_code == 1
        assert "unknown query 'albums'" in result.output
        assert not (tmp_path / "output").exists()

    def test_missing_manifest(self, runner, tmp_path):
        result = runner.invoke(app, ["--manifest", str(tmp_path / "none.toml"), "validate"])
        assert result.exit_code == 1
        assert "cannot read manifest" in result.output

    def test_manifest_from_environment(self, runner, manifest_path, monkeypatch):
        from sqlloom.core import settings

        monkeypatch.setenv("SQLLOOM_MANIFEST_PATH", str(manifest_path))
        settings.get_settings.cache_clear()
        try:
            result = runner.invoke(app, ["validate"])
        finally:
            settings.get_settings.cache_clear()
        assert result.exit_code == 0
        assert str(manifest_path) in result.output


class TestRenderAndStatus:
    def test_render_then_status_reports_no_changes(self, invoke, manifest_path):
        assert invoke("render").exit_code == 0
        assert (manifest_path.parent / "output" / "tests" / "songs_by_genre_test.sql").is_file()

        result = invoke("status", "--assert-no-changes")
        assert result.exit_code == 0
        assert "Query: Unchanged:" in result.output
        assert "  Test: Unchanged:" in result.output

    def test_edited_output_fails_assertion(self, invoke, manifest_path):
        invoke("render")
        (manifest_path.parent / "output" / "queries" / "songs.sql").write_text("-- edited\n")

        result = invoke("status", "--assert-no-changes")
        assert result.exit_code == 1
        assert "Query: Changed:" in result.output

        assert invoke("status").exit_code == 0

    def test_status_before_render(self, invoke, manifest_path):
        result = invoke("status", "--assert-no-changes")
        assert result.exit_code == 1
        assert result.output.count("New:") == 3
        assert not (manifest_path.parent / "output").exists()

    def test_render_error_is_fatal(self, invoke, manifest_path):
        template = manifest_path.parent / "templates" / "tests" / "songs_by_genre_test.sql.j2"
        template.write_text("{{ missing_var }}\n")

        result = invoke("render")
        assert result.exit_code == 2
        assert "Error: Failed to render" in result.output
        assert "songs_by_genre_test.sql.j2" in result.output

    def test_arithmetic_error_in_template_is_fatal(self, invoke, manifest_path):
        template = manifest_path.parent / "templates" / "tests" / "songs_by_genre_test.sql.j2"
        template.write_text("{{ 1 / 0 }}\n")

        result = invoke("render")
        assert result.exit_code == 2
        assert "Error: Failed to render" in result.output
        assert "ZeroDivisionError" in result.output
        assert "Traceback" not in result.output


class TestSummary:
    def test_table(self, invoke):
        result = invoke("summary")
        assert result.exit_code == 0
        for header in ("Id", "Query", "Template", "Tests"):
            assert header in result.output
        assert "songs_by_genre" in result.output


class TestCoverage:
    def test_report(self, invoke):
        result = invoke("coverage")
        assert result.exit_code == 0
        assert "50.00%" in result.output
        assert "Yes (1)" in result.output
        assert "No" in result.output

    def test_fail_under(self, invoke):
        result = invoke("coverage", "--fail-under", "60")
        assert result.exit_code == 1
        assert "50.00%" in result.output

    def test_pass_over(self, invoke):
        assert invoke("coverage", "--fail-under", "40").exit_code == 0

    @pytest.mark.parametrize("value", ["abc", "101", "1_0", " 50 "])
    def test_invalid_threshold(self, invoke, value):
        result = invoke("coverage", "--fail-under", value)
        assert result.exit_code == 2
        assert "Total" not in result.output
