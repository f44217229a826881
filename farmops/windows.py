# farmops/windows.py
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, List, Tuple, TypeVar

import pandas as pd

T = TypeVar("T")


def parse_date(value) -> datetime | None:
    """
    Parse a store date ("2024-06-05", "2024-06-05T08:30:00", a date or a
    datetime) into a naive datetime. Returns None for empty or unparseable
    values. Aware datetimes are converted to local time first.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max)


def start_of_month(moment: datetime) -> datetime:
    return datetime.combine(moment.date().replace(day=1), time.min)


def end_of_month(moment: datetime) -> datetime:
    last_day = (pd.Timestamp(moment.date()) + pd.offsets.MonthEnd(0)).date()
    return datetime.combine(last_day, time.max)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move by calendar months, clamping the day to the target month's end."""
    return (pd.Timestamp(moment) + pd.DateOffset(months=months)).to_pydatetime()


def within_range(
    records: Iterable[T],
    date_of: Callable[[T], object],
    start: datetime,
    end: datetime,
) -> List[T]:
    """Records whose date is present and inside [start, end], in input order."""
    selected = []
    for record in records:
        moment = parse_date(date_of(record))
        if moment is not None and start <= moment <= end:
            selected.append(record)
    return selected


def within_window(
    records: Iterable[T],
    date_of: Callable[[T], object],
    now: datetime,
    days: int,
) -> List[T]:
    """
    Rolling window anchored at `now`: from the start of today through the
    end of the day `days` days ahead, both ends inclusive.
    """
    now = parse_date(now)
    return within_range(records, date_of, start_of_day(now), end_of_day(now + timedelta(days=days)))


def month_window(now: datetime, months: int = 6) -> Tuple[datetime, datetime]:
    """The last `months` calendar months including the current one."""
    now = parse_date(now)
    return start_of_month(shift_months(now, -(months - 1))), end_of_month(now)
