from __future__ import annotations

from typing import Final

_CONTROL_CHARS: Final[frozenset[str]] = frozenset(
    chr(code) for code in range(0x00, 0x20) if chr(code) not in {"\t", "\n"}
)


def sanitize_log_message(value: str) -> str:
    """Normalise log messages by stripping control characters and CR sequences."""

    normalised = value.replace("\r\n", "\n").replace("\r", "\n")
    return "".join(ch for ch in normalised if ch not in _CONTROL_CHARS)


def normalise_field(value: str | None) -> str | None:
    """Trim operator input; blank strings collapse to ``None``."""

    if value is None:
        return None
    trimmed = sanitize_log_message(value).strip()
    return trimmed or None


__all__ = ["normalise_field", "sanitize_log_message"]
