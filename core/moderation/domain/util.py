"""Helpers and utilities."""

from typing import Any, Optional, Union
from datetime import date, datetime

from dateutil.parser import parse as parse_date
from pytz import UTC


def get_tzaware_utc_now() -> datetime:
    """Generate a datetime for the current moment in UTC."""
    return datetime.now(UTC)


def coerce_date(value: Any) -> Optional[date]:
    """Get a :class:`date` from a date, datetime, or ISO-8601 string."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date(value).date()
    raise TypeError(f'Not a date: {value!r}')


def coerce_datetime(value: Union[datetime, str, None]) -> Optional[datetime]:
    """Get a UTC-aware :class:`datetime`; naive values are assumed UTC."""
    if value is None:
        return None
    if isinstance(value, str):
        value = parse_date(value)
    if not isinstance(value, datetime):
        raise TypeError(f'Not a timestamp: {value!r}')
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
