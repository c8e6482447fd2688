"""Flexible calendar-date parsing for imported data."""

from __future__ import annotations

import re
from datetime import date, datetime

from dateutil import parser as date_parser

_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DOT_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")

# Two anchors that differ in year, month and day; a parse is only complete
# when both give the same date.
_FALLBACK_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _build(year: str, month: str, day: str) -> date | None:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_date(text: str | None, *, day_first_slashes: bool = False) -> date | None:
    """Parse a textual date into a calendar date.

    Recognised shapes, tried in order:
    - ``YYYY-M-D`` (ISO)
    - ``M/D/YYYY`` (US); with day_first_slashes, ``D/M/YYYY``
    - ``D.M.YYYY`` (European)
    - anything dateutil can read in full, e.g. ``Jan 15, 2024``

    Text that leaves the year, month or day unstated (``2024``, ``March``,
    ``monday``) is rejected rather than filled in from the current date.

    Slash dates are resolved by shape alone: ``13/02/2024`` is read month-first
    and rejected rather than retried day-first.

    Returns:
        The parsed date, or None if the text is empty or not a valid date.
    """
    if text is None:
        return None
    cleaned = text.strip()
    if not cleaned:
        return None

    match = _ISO_RE.match(cleaned)
    if match:
        year, month, day = match.groups()
        return _build(year, month, day)

    match = _SLASH_RE.match(cleaned)
    if match:
        first, second, year = match.groups()
        if day_first_slashes:
            return _build(year, second, first)
        return _build(year, first, second)

    match = _DOT_RE.match(cleaned)
    if match:
        day, month, year = match.groups()
        return _build(year, month, day)

    return _parse_complete(cleaned)


def _parse_complete(text: str) -> date | None:
    try:
        first, second = (
            date_parser.parse(text, default=default).date() for default in _FALLBACK_DEFAULTS
        )
    except (ValueError, OverflowError):
        return None
    return first if first == second else None


def format_date(value: date) -> str:
    """Format a date in canonical ``YYYY-MM-DD`` form."""
    return value.isoformat()
