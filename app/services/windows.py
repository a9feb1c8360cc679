"""Date parsing and UTC query windows cut in the billing timezone.

Windows are half-open ``[start, end)`` and expressed as UTC instants, ready to
filter the samples table.
"""

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo

import pytz

from app.config import settings

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")

Window = tuple[datetime, datetime]


def billing_tz() -> tzinfo:
    return pytz.timezone(settings.billing_timezone)


def parse_date(value: str) -> date:
    """Parse ``YYYY-MM-DD``. Raises ValueError on bad format or impossible dates."""
    if not _DATE_RE.match(value):
        raise ValueError(f"Invalid date format '{value}'. Use YYYY-MM-DD")
    return date.fromisoformat(value)


def parse_month(value: str) -> date:
    """Parse ``YYYY-MM`` into the first day of that month."""
    if not _MONTH_RE.match(value):
        raise ValueError(f"Invalid month format '{value}'. Use YYYY-MM")
    year, month = (int(part) for part in value.split("-"))
    return date(year, month, 1)


def local_today(tz: tzinfo, now: datetime | None = None) -> date:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(tz).date()


def _local_midnight_utc(day: date, tz: tzinfo) -> datetime:
    return _localize(datetime.combine(day, time.min), tz)


def _localize(naive: datetime, tz: tzinfo) -> datetime:
    # pytz zones must go through localize() to pick the right offset
    if hasattr(tz, "localize"):
        aware = tz.localize(naive)
    else:
        aware = naive.replace(tzinfo=tz)
    return aware.astimezone(timezone.utc)


def day_window(day: date, tz: tzinfo) -> Window:
    return _local_midnight_utc(day, tz), _local_midnight_utc(day + timedelta(days=1), tz)


def month_window(first_day: date, tz: tzinfo) -> Window:
    if first_day.month == 12:
        next_month = date(first_day.year + 1, 1, 1)
    else:
        next_month = date(first_day.year, first_day.month + 1, 1)
    return _local_midnight_utc(first_day, tz), _local_midnight_utc(next_month, tz)


def hour_range_window(
    day: date, tz: tzinfo, start_hour: int | None = None, end_hour: int | None = None
) -> Window:
    """Day window narrowed to ``[start_hour:00, end_hour+1:00)`` local time."""
    start, end = day_window(day, tz)
    if start_hour is not None:
        start = _localize(datetime.combine(day, time(start_hour)), tz)
    if end_hour is not None and end_hour < 23:
        end = _localize(datetime.combine(day, time(end_hour + 1)), tz)
    return start, end


def parse_instant(value: str, tz: tzinfo) -> datetime:
    """Parse an ISO-8601 instant. Naive values are read as billing-timezone local time."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return _localize(parsed, tz)
    return parsed.astimezone(timezone.utc)
