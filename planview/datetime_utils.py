"""
Date utility functions for the application.
"""
import os
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo


def get_plant_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """
    Get the timezone the plant calendar runs in.

    Args:
        tz_name: IANA timezone name. Falls back to PLANT_TIMEZONE, then UTC.
    """
    return ZoneInfo(tz_name or os.environ.get("PLANT_TIMEZONE") or "UTC")


def plant_today(tz_name: Optional[str] = None) -> date:
    """Return today's date on the plant calendar."""
    return datetime.now(get_plant_timezone(tz_name)).date()


def parse_iso_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD string (or a date/datetime) into a date.

    Datetime strings are accepted and truncated to their date part.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")


def format_iso_date(value: Optional[date]) -> Optional[str]:
    """Format a date as YYYY-MM-DD, passing None through."""
    if value is None:
        return None
    return value.isoformat()
