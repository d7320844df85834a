"""UTC time helpers shared by billing and usage code."""

from datetime import date, datetime, timedelta, timezone
from typing import Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_of_utc_day(moment: datetime) -> datetime:
    """Midnight UTC of the day containing moment."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    else:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def window_start(window_days: int, now: datetime) -> datetime:
    """First instant of a trailing window of whole UTC days ending today."""
    return start_of_utc_day(now) - timedelta(days=window_days - 1)


def from_unix(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def as_date(value: Union[date, datetime, str]) -> date:
    """
    Normalize a SQL DATE() result.

    PostgreSQL returns date objects, SQLite returns ISO strings.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])
