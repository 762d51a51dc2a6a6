"""Small string helpers."""

from __future__ import annotations

_WHITESPACE = " \t\n\v\f\r"


def split(s: str, delim: str) -> list[str]:
    """Split ``s`` at each ``delim``; a trailing delimiter yields no empty item."""
    if len(delim) != 1:
        raise ValueError("delimiter must be a single character")
    parts = s.split(delim)
    if parts[-1] == "":
        parts.pop()
    return parts


def trim(s: str) -> str:
    """Return ``s`` without leading and trailing whitespace."""
    return s.strip(_WHITESPACE)