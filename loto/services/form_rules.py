"""Form input rules shared by the add and edit flows.

- Form names: non-empty, at least 5 characters, letters/digits and - . ' # : space.
- Numeric fields: non-digits stripped, then truncated to a per-field width.
"""

from __future__ import annotations

import re

MIN_NAME_LENGTH = 5
UNTITLED_NAME = "Untitled Procedure"

_NAME_RE = re.compile(r"[A-Za-z0-9\-.' #:]+")
_NON_DIGIT_RE = re.compile(r"[^0-9]")

NUMERIC_FIELD_LIMITS: dict[str, int] = {
    "procedure_number": 3,
    "revision": 1,
    "isolation_points": 1,
}


def is_valid_name(value) -> bool:
    """Return True when ``value`` is usable as a form name.

    Gates the "create" and "close edit" actions.
    """
    if not isinstance(value, str) or not value:
        return False
    if len(value) < MIN_NAME_LENGTH:
        return False
    return _NAME_RE.fullmatch(value) is not None


def sanitize_numeric(value, max_length: int) -> str:
    """Strip non-digit characters and truncate to ``max_length``.

    >>> sanitize_numeric("12a3b", 3)
    '123'
    """
    if value is None:
        return ""
    digits = _NON_DIGIT_RE.sub("", str(value))
    return digits[:max_length]


def sanitize_field(field: str, value) -> str:
    """Apply the numeric rule for ``field`` if it has one, else coerce to str."""
    limit = NUMERIC_FIELD_LIMITS.get(field)
    if limit is not None:
        return sanitize_numeric(value, limit)
    return "" if value is None else str(value)


def display_title(name: str | None) -> str:
    return name or UNTITLED_NAME
