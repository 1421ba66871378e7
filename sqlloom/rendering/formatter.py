"""Pluggable post-processing of rendered SQL."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .._utils import run_logged
from ..core.errors import FormatterError

logger = logging.getLogger(__name__)


class Formatter:
    """Deterministic text transformation applied before writing or comparing."""

    name = "identity"

    def format(self, text: str) -> str:
        return text

    def executables(self) -> list[str]:
        """External commands this formatter needs on PATH."""
        return []


class PgFormatter(Formatter):
    """Formats SQL by piping it through pgFormatter's ``pg_format``."""

    name = "pgFormatter"

    def __init__(self, exec_path: str = "pg_format", conf_path: Path | None = None):
        self.exec_path = exec_path
        self.conf_path = conf_path

    def command(self) -> list[str]:
        cmd = [self.exec_path]
        if self.conf_path is not None:
            cmd += ["--config", str(self.conf_path)]
        # read from stdin
        cmd.append("-")
        return cmd

    def format(self, text: str) -> str:
        try:
            result = run_logged(self.command(), input=text)
        except FileNotFoundError as exc:
            raise FormatterError(Path(self.exec_path), "formatter not found") from exc
        except subprocess.CalledProcessError as exc:
            raise FormatterError(
                Path(self.exec_path), f"formatter exited with status {exc.returncode}"
            ) from exc
        return result.stdout

    def executables(self) -> list[str]:
        return [self.exec_path]

    def __repr__(self) -> str:
        return f"PgFormatter(exec_path={self.exec_path!r}, conf_path={self.conf_path!r})"


def apply_formatter(formatter: Formatter | None, text: str) -> str:
    if formatter is None:
        return text
    return formatter.format(text)
