"""Text helpers for diagnostics and log output."""

from __future__ import annotations

_KEPT_CONTROL_CHARS = frozenset("\n\r\t")


def clean_excerpt(text: str, max_len: int = 300) -> str:
    """Strip control characters (except newline, CR and tab) and truncate.

    Truncated excerpts end with "..." and never exceed max_len. Used for error bodies in exceptions
    and logs.
    """
    cleaned = "".join(
        ch for ch in text if ord(ch) >= 32 or ch in _KEPT_CONTROL_CHARS
    )
    if len(cleaned) > max_len:
        return cleaned[: max(max_len - 3, 0)] + "..."
    return cleaned


def mask_secret(value: str | None) -> str:
    """Return a masked token for logging (e.g. 1234...abcd)."""
    if not value or len(value) < 10:
        return "***"
    return f"{value[:4]}...{value[-4:]}"
