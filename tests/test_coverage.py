"""Tests for coverage aggregation."""

from __future__ import annotations

from pathlib import Path

import pytest

from sqlloom.core.models import Queries, Query, TestTemplate, TestTemplates
from sqlloom.pipeline.coverage import compute_coverage, parse_threshold


def _build(num_queries: int, tested: dict[int, int]):
    queries = Queries()
    tts = TestTemplates()
    for i in range(num_queries):
        queries.add(Query(id=f"q{i}", template=Path(f"q{i}.sql.j2")))
        for j in range(tested.get(i, 0)):
            tts.add(
                TestTemplate(
                    path=Path(f"q{i}_{j}.sql.j2"),
                    output=Path(f"q{i}_{j}.sql"),
                    query_id=f"q{i}",
                )
            )
    return queries, tts


class TestComputeCoverage:
    def test_half_covered(self, metadata):
        report = compute_coverage(metadata.queries, metadata.test_templates)
        assert [(r.query_id, r.num_tests) for r in report.rows] == [
            ("songs", 0),
            ("songs_by_genre", 1),
        ]
        assert report.num_tested == 1
        assert report.num_untested == 1
        assert report.untested == ["songs"]
        assert report.percent == pytest.approx(50.0)
        assert report.fails_under(60)
        assert not report.fails_under(40)
        assert not report.fails_under(50)
        assert not report.fails_under(None)

    @pytest.mark.parametrize(
        "n, tested, expected",
        [
            (3, {0: 1}, 100 / 3),
            (4, {0: 2, 1: 1, 3: 1}, 75.0),
            (2, {0: 1, 1: 3}, 100.0),
            (5, {}, 0.0),
        ],
    )
    def test_percent(self, n, tested, expected):
        report = compute_coverage(*_build(n, tested))
        assert report.percent == pytest.approx(expected)
        assert report.num_tested == len(tested)

    def test_no_queries(self):
        report = compute_coverage(*_build(0, {}))
        assert report.num_queries == 0
        assert report.percent is None
        assert not report.fails_under(100)
        assert not report.fails_under(None)

    def test_zero_threshold_never_fails(self):
        assert not compute_coverage(*_build(2, {})).fails_under(0)


class TestParseThreshold:
    @pytest.mark.parametrize("value, expected", [("0", 0), ("60", 60), ("100", 100)])
    def test_valid(self, value, expected):
        assert parse_threshold(value) == expected

    @pytest.mark.parametrize(
        "value, message",
        [
            ("abc", "not a number"),
            ("12.5", "not a number"),
            ("", "not a number"),
            ("1_0", "not a number"),
            (" 50 ", "not a number"),
            ("\u0665\u0660", "not a number"),
            ("-1", "not a number"),
            ("101", "not in range"),
        ],
    )
    def test_invalid(self, value, message):
        with pytest.raises(ValueError, match=message):
            parse_threshold(value)
