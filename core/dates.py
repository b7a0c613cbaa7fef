import calendar
from datetime import date, datetime, timedelta, tzinfo
from typing import Tuple


def now(tz: tzinfo) -> datetime:
    return datetime.now(tz)


def today(tz: tzinfo) -> date:
    return now(tz).date()


def yesterday(tz: tzinfo) -> date:
    return today(tz) - timedelta(days=1)


def yesterdays_date(tz: tzinfo) -> Tuple[int, int, int]:
    """Return (year, month, day) of yesterday in the given zone."""
    value = yesterday(tz)
    return value.year, value.month, value.day


def month_name(month: int) -> str:
    return calendar.month_name[month]


def pad(value: int) -> str:
    return f"{value:02d}"
