"""Text cleanup applied to every CSV cell before validation."""

from __future__ import annotations

# Column caps in characters, applied after sanitizing.
MAX_LENGTHS: dict[str, int] = {
    "description": 500,
    "notes": 1000,
    "category": 100,
    "sub_category": 100,
    "payment_mode": 100,
}


def sanitize(raw: str) -> str:
    """Drop C0 control characters and DEL, then trim surrounding whitespace.

    Tabs and newlines are control characters too, so they are removed rather
    than normalized to spaces.
    """

    cleaned = "".join(ch for ch in raw if ord(ch) >= 0x20 and ord(ch) != 0x7F)
    return cleaned.strip()


def cap(value: str, field: str) -> tuple[str, bool]:
    """Truncate ``value`` to the cap for ``field``.

    Returns the (possibly shortened) value and whether truncation happened.
    Fields without a cap pass through unchanged.
    """

    limit = MAX_LENGTHS.get(field)
    if limit is None or len(value) <= limit:
        return value, False
    return value[:limit], True


__all__ = ["MAX_LENGTHS", "sanitize", "cap"]
