"""Error types raised by sqlloom."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class Mistake(BaseModel):
    """A single problem found in a manifest."""

    kind: str
    message: str
    subject: str | None = None

    def err_msg(self) -> str:
        if self.subject:
            return f"[{self.kind}] {self.subject}: {self.message}"
        return f"[{self.kind}] {self.message}"


class SqlloomError(Exception):
    """Base class for all sqlloom failures."""


class ManifestError(SqlloomError):
    """Raised when the manifest cannot be decoded.

    Carries every mistake found, not just the first one.
    """

    def __init__(self, mistakes: list[Mistake]) -> None:
        self.mistakes = mistakes
        super().__init__("; ".join(m.err_msg() for m in mistakes))


class DecodeError(SqlloomError):
    """Raised when a raw TOML value does not have the expected type."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"'{key}': {message}")


class DuplicateQueryId(SqlloomError):
    """Raised when a query id is inserted twice."""

    def __init__(self, query_id: str) -> None:
        self.query_id = query_id
        super().__init__(f"Duplicate query id: {query_id!r}")


class UnknownQueryId(SqlloomError, KeyError):
    """Raised when looking up a query id that was never declared."""

    def __init__(self, query_id: str) -> None:
        self.query_id = query_id
        super().__init__(f"Unknown query id: {query_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class RenderError(SqlloomError):
    """Raised when a template is missing, unreadable or fails to render."""

    def __init__(self, template: Path, reason: str) -> None:
        self.template = template
        super().__init__(f"Failed to render {template}: {reason}")


class OutputError(SqlloomError):
    """Raised when an output file cannot be read or written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"{path}: {reason}")


class FormatterError(OutputError):
    """Raised when the external formatter fails."""
