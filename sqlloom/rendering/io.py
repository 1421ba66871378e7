"""Writing rendered output and reconciling it with files on disk."""

from __future__ import annotations

import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Sequence

from ..core.errors import OutputError
from .formatter import Formatter, apply_formatter

logger = logging.getLogger(__name__)


class Status(str, Enum):
    """How freshly rendered text relates to the file currently on disk."""

    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"

    def label(self) -> str:
        return self.value.capitalize()


def ensure_output_dirs(*dirs: Path) -> None:
    """Create output directories that do not exist yet."""
    for d in dirs:
        try:
            d.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(d, f"cannot create directory: {exc.strerror or exc}") from exc


def atomic_write_text(path: Path, text: str, mode: int = 0o644) -> None:
    """Write text to a file atomically using a temporary file.

    Args:
        path: Destination file path
        text: Text content to write, stored as UTF-8 without newline translation
        mode: File permissions (octal)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        os.chmod(path, mode)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def _check_roots(path: Path, roots: Sequence[Path]) -> None:
    resolved = path.resolve()
    if not any(resolved.is_relative_to(root.resolve()) for root in roots):
        allowed = ", ".join(str(r) for r in roots)
        raise OutputError(path, f"refusing to write outside output directories ({allowed})")


def write(
    path: Path,
    formatter: Formatter | None,
    text: str,
    *,
    roots: Sequence[Path] | None = None,
) -> None:
    """Format ``text`` and write it to ``path``.

    Args:
        path: Destination file path
        formatter: Optional formatter applied before writing
        text: Freshly rendered text
        roots: When given, ``path`` must be inside one of these directories

    Raises:
        OutputError: If the path is outside ``roots`` or the write fails
    """
    if roots is not None:
        _check_roots(path, roots)
    output = apply_formatter(formatter, text)
    try:
        atomic_write_text(path, output)
    except OSError as exc:
        raise OutputError(path, f"cannot write file: {exc.strerror or exc}") from exc
    logger.info(f"Wrote {path}")


def status(path: Path, formatter: Formatter | None, text: str) -> Status:
    """Classify ``path`` against freshly rendered text without touching disk.

    Args:
        path: File to compare against
        formatter: Optional formatter applied to ``text`` before comparing
        text: Freshly rendered text

    Returns:
        NEW if the file is absent, UNCHANGED if its bytes match, else CHANGED
    """
    output = apply_formatter(formatter, text).encode("utf-8")
    try:
        existing = path.read_bytes()
    except FileNotFoundError:
        return Status.NEW
    except OSError as exc:
        raise OutputError(path, f"cannot read file: {exc.strerror or exc}") from exc
    return Status.UNCHANGED if existing == output else Status.CHANGED
