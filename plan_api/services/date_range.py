import calendar
from datetime import datetime, time, timezone
from typing import Optional, Tuple, Union

from plan_api.models.filter_model import RELATIVE_RANGE_MONTHS, CustomDateRange, NamedDateRange

Bounds = Tuple[datetime, datetime]


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def start_of_day(value: datetime) -> datetime:
    value = _as_utc(value)
    return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)


def end_of_day(value: datetime) -> datetime:
    value = _as_utc(value)
    return datetime.combine(value.date(), time.max, tzinfo=value.tzinfo)


def sub_months(value: datetime, months: int) -> datetime:
    """Step back whole calendar months, clamping to the target month's last day."""
    index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def resolve_date_range(
    date_range: Union[NamedDateRange, CustomDateRange],
    now: Optional[datetime] = None,
) -> Optional[Bounds]:
    """Turn a validated date range into inclusive ``(start, end)`` bounds.

    Returns None for ``all_time``. An unknown tag can only mean validation was
    bypassed, so it raises RuntimeError rather than a client error.
    """
    if isinstance(date_range, CustomDateRange):
        return start_of_day(date_range.start_date), end_of_day(date_range.end_date)

    if date_range.kind == "all_time":
        return None

    months = RELATIVE_RANGE_MONTHS.get(date_range.kind)
    if months is None:
        raise RuntimeError(f"Unrecognized date range {date_range.kind!r} passed validation.")

    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return start_of_day(sub_months(now, months)), end_of_day(now)
