"""Typed decoders for raw TOML values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..core.errors import DecodeError


def decode_string(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise DecodeError(key, f"expected a string, got {type(value).__name__}")
    return value


def decode_path(key: str, value: Any, base_dir: Path | None = None) -> Path:
    """Decode a path, resolving relative values against ``base_dir``."""
    path = Path(decode_string(key, value))
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path


def decode_strlist(key: str, value: Any) -> list[str]:
    if not isinstance(value, list):
        raise DecodeError(key, f"expected an array, got {type(value).__name__}")
    return [decode_string(f"{key}[{i}]", item) for i, item in enumerate(value)]


def decode_table(key: str, value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(key, f"expected a table, got {type(value).__name__}")
    return value


def decode_array_of_tables(key: str, value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        raise DecodeError(key, f"expected an array of tables, got {type(value).__name__}")
    return [decode_table(f"{key}[{i}]", item) for i, item in enumerate(value)]


def require(table: dict[str, Any], key: str, context: str) -> Any:
    """Return ``table[key]`` or fail with a message naming the entry."""
    if key not in table:
        raise DecodeError(key, f"missing in '{context}' entry")
    return table[key]
