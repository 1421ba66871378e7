"""Sqlloom - manifest-driven SQL query and test generator.

Renders Jinja2 query templates and their test templates, and reports
whether generated files are stale and how many queries have tests.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["main"]
