"""Timezone utilities for the user's configured local time."""

from datetime import date, datetime
from typing import Optional

import pytz
from dateutil import parser as date_parser

from portfolio_client.config.settings import get_settings


def get_local_tz() -> pytz.BaseTzInfo:
    """Return the configured local timezone."""
    return pytz.timezone(get_settings().timezone)


def now_local(tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Return current time in the local timezone."""
    return datetime.now(tz or get_local_tz())


def today_local(tz: Optional[pytz.BaseTzInfo] = None) -> date:
    """Return today's calendar date in the local timezone."""
    return now_local(tz).date()


def to_local(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Convert a datetime to the local timezone."""
    tz = tz or get_local_tz()
    if dt.tzinfo is None:
        # Naive datetimes from the backend are UTC
        return pytz.utc.localize(dt).astimezone(tz)
    return dt.astimezone(tz)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp as returned by the backend.

    Accepts fractional seconds or none, and date-only values. Naive
    results are assumed to be UTC.
    """
    dt = date_parser.isoparse(value)
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC timestamp for the backend."""
    if dt.tzinfo is None:
        dt = get_local_tz().localize(dt)
    return dt.astimezone(pytz.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
