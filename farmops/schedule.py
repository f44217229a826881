# farmops/schedule.py
from dataclasses import dataclass
from datetime import datetime
from typing import List, Literal, Sequence

from .models import Production
from .windows import parse_date, within_window

EventKind = Literal["harvest", "planting"]


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    date: str
    label: str
    kind: EventKind
    status: str

    @property
    def moment(self) -> datetime | None:
        return parse_date(self.date)


def merge_events(
    first: Sequence[CalendarEvent],
    second: Sequence[CalendarEvent],
    limit: int = 5,
) -> List[CalendarEvent]:
    """
    Concatenate two event lists, sort by date and keep the first `limit`.

    The sort is stable, so events sharing a date keep the order they had in
    `first + second`. Events with an unreadable date sort last.
    """
    combined = list(first) + list(second)
    combined.sort(key=lambda e: (e.moment is None, e.moment or datetime.min))
    return combined[:limit]


def harvest_events(productions: Sequence[Production], now: datetime, days: int = 30) -> List[CalendarEvent]:
    due = within_window(productions, lambda p: p.estimated_harvest_date, now, days)
    return [
        CalendarEvent(id=p.id, date=p.estimated_harvest_date, label=p.commodity, kind="harvest", status=p.status)
        for p in due
    ]


def planting_events(productions: Sequence[Production], now: datetime, days: int = 30) -> List[CalendarEvent]:
    due = within_window(productions, lambda p: p.planting_date, now, days)
    return [
        CalendarEvent(id=p.id, date=p.planting_date, label=p.commodity, kind="planting", status=p.status)
        for p in due
    ]


def upcoming_events(
    productions: Sequence[Production],
    now: datetime,
    days: int = 30,
    limit: int = 5,
) -> List[CalendarEvent]:
    """Expected harvests and plantings in the next `days` days, soonest first."""
    return merge_events(
        harvest_events(productions, now, days),
        planting_events(productions, now, days),
        limit=limit,
    )
