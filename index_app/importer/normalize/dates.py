"""Lenient date parsing; a malformed date never aborts an import."""

from __future__ import annotations

from datetime import datetime

from dateutil import parser as date_parser

AMERICAN_DATE_FORMAT = "%m/%d/%Y"


def parse_date(value: object | None) -> str | None:
    """Parse ``value`` with dateutil heuristics and return ``YYYY-MM-DD``."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date_parser.parse(value).date().isoformat()
    except (ValueError, OverflowError, TypeError):
        return None


def parse_american_date(value: object | None) -> str | None:
    """Parse ``value`` strictly as month/day/four-digit-year."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), AMERICAN_DATE_FORMAT).date().isoformat()
    except ValueError:
        return None
