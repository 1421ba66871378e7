"""Test coverage over queries."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..core.models import Queries, TestTemplates


class QueryCoverage(BaseModel):
    query_id: str
    num_tests: int = Field(..., ge=0)

    @property
    def has_tests(self) -> bool:
        return self.num_tests > 0


class CoverageReport(BaseModel):
    """Which queries have at least one bound test template."""

    rows: list[QueryCoverage] = Field(default_factory=list)

    @property
    def num_queries(self) -> int:
        return len(self.rows)

    @property
    def num_untested(self) -> int:
        return sum(1 for r in self.rows if not r.has_tests)

    @property
    def num_tested(self) -> int:
        return self.num_queries - self.num_untested

    @property
    def untested(self) -> list[str]:
        return [r.query_id for r in self.rows if not r.has_tests]

    @property
    def percent(self) -> float | None:
        """Share of tested queries, or None for a manifest without queries."""
        if self.num_queries == 0:
            return None
        return self.num_tested / self.num_queries * 100

    def fails_under(self, threshold: int | None) -> bool:
        if threshold is None:
            return False
        # nothing to test counts as fully covered
        percent = self.percent if self.percent is not None else 100.0
        return percent < threshold


def compute_coverage(queries: Queries, test_templates: TestTemplates) -> CoverageReport:
    rows = [
        QueryCoverage(query_id=q.id, num_tests=len(test_templates.find_by_query(q.id)))
        for q in queries
    ]
    return CoverageReport(rows=rows)


def parse_threshold(value: str) -> int:
    """Parse a coverage threshold, an integer between 0 and 100."""
    if not (value.isascii() and value.isdigit()):
        raise ValueError("threshold is not a number")
    threshold = int(value)
    if not 0 <= threshold <= 100:
        raise ValueError("threshold not in range 0..100")
    return threshold
