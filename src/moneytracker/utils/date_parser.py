"""Date parsing utilities."""

from datetime import date, datetime, tzinfo
from typing import Optional

from dateutil import parser as date_parser
from dateutil import tz


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    ISO dates ("2024-01-15") are tried first; anything else goes through
    dateutil with day-first disabled ("01/15/2024", "January 15, 2024").

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Empty date string")

    date_str = date_str.strip()
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        return date_parser.parse(date_str, dayfirst=False).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}'") from e


def resolve_timezone(name: Optional[str], default: str = "UTC") -> tzinfo:
    """Return the tzinfo for an IANA zone name, falling back to ``default``."""
    zone = tz.gettz(name) if name else None
    if zone is None:
        zone = tz.gettz(default) or tz.UTC
    return zone


def local_date(moment: datetime, zone: tzinfo) -> date:
    """Calendar date of ``moment`` in ``zone``. Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz.UTC)
    return moment.astimezone(zone).date()
