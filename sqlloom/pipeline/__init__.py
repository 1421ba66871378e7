from .coverage import CoverageReport, compute_coverage, parse_threshold
from .orchestrator import no_changes, prepared_statement, render_all, status_all

__all__ = [
    "CoverageReport",
    "compute_coverage",
    "no_changes",
    "parse_threshold",
    "prepared_statement",
    "render_all",
    "status_all",
]
