from .engine import Engine, load_template, render_template
from .formatter import Formatter, PgFormatter, apply_formatter
from .io import Status, ensure_output_dirs, status, write

__all__ = [
    "Engine",
    "Formatter",
    "PgFormatter",
    "Status",
    "apply_formatter",
    "ensure_output_dirs",
    "load_template",
    "render_template",
    "status",
    "write",
]
