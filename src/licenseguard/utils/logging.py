"""Helpers for writing license data to logs.

License fields such as customer names and additional attributes are set by
whoever issued the license file, so they are cleaned before they reach a log
line.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

_TRUNCATED = "...[truncated]"


def _clean(text: str, max_length: int) -> str:
    flattened = " ".join(text.splitlines())
    cleaned = "".join(ch for ch in flattened if ch >= " " and ch != "\x7f")
    if len(cleaned) > max_length:
        return cleaned[:max_length] + _TRUNCATED
    return cleaned


def sanitize_for_log(value: Any, max_length: int = 200) -> Any:
    """Return a log-safe rendering of ``value``.

    Line breaks collapse to spaces, other control characters are dropped and
    long strings are truncated. Mappings and sequences are cleaned element by
    element; datetimes render as ISO 8601 and enums as their value.
    """
    if value is None:
        return ""

    if isinstance(value, Enum):
        return _clean(str(value.value), max_length)

    if isinstance(value, datetime):
        return value.isoformat()

    if isinstance(value, bytes):
        return _clean(value.decode("utf-8", errors="replace"), max_length)

    if isinstance(value, dict):
        return {
            _clean(str(k), max_length): sanitize_for_log(v, max_length)
            for k, v in value.items()
        }

    if isinstance(value, (list, tuple, set, frozenset)):
        return [sanitize_for_log(item, max_length) for item in value]

    return _clean(str(value), max_length)
