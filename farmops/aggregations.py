# farmops/aggregations.py
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Hashable, Iterable, List, Literal, Sequence, TypeVar

from .models import Activity, Land, Production
from .windows import month_window, parse_date, shift_months, start_of_month, within_range

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

Direction = Literal["up", "down", "neutral"]


# === DATA CLASSES ===


@dataclass(frozen=True)
class GroupTotal:
    total: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class Trend:
    change_pct: float
    direction: Direction


@dataclass(frozen=True)
class OverviewStats:
    productive_area_m2: float
    vacant_area_m2: float
    active_crops: int
    total_harvest_kg: float
    harvested_count: int
    production_count: int


@dataclass(frozen=True)
class MonthlyYield:
    month: str
    month_start: datetime
    yield_kg: float


@dataclass(frozen=True)
class CommoditySummary:
    commodity: str
    recent_yield_kg: float
    previous_yield_kg: float
    count: int
    trend: Trend


# === CORE REDUCERS ===


def round_half_up(value: float, places: int = 1) -> float:
    """Round halves away from zero (2.25 -> 2.3), unlike the builtin round()."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def group_sum(
    records: Iterable[T],
    key: Callable[[T], K],
    measure: Callable[[T], float | None],
) -> Dict[K, GroupTotal]:
    """
    Partition records by key and sum a measure per key.

    Keys keep first-seen order. A record whose measure is None still counts
    toward its group's count but adds nothing to the total.
    """
    groups: Dict[K, GroupTotal] = {}
    for record in records:
        k = key(record)
        value = measure(record)
        current = groups.get(k, GroupTotal())
        groups[k] = GroupTotal(
            total=current.total + (value if value is not None else 0.0),
            count=current.count + 1,
        )
    return groups


def compute_trend(current: float, previous: float) -> Trend:
    """
    Signed percentage change from previous to current.

    With no previous value there is nothing to divide by: any current value
    reads as +100%, and zero against zero is flat.
    """
    if previous > 0:
        change = (current - previous) / previous * 100
    elif current > 0:
        change = 100.0
    else:
        change = 0.0

    if change > 0:
        direction = "up"
    elif change < 0:
        direction = "down"
    else:
        direction = "neutral"
    return Trend(change_pct=float(change), direction=direction)


# === DASHBOARD VIEWS ===


def overview_stats(lands: Sequence[Land], productions: Sequence[Production]) -> OverviewStats:
    """Headline numbers for the overview page."""
    harvested = [p for p in productions if p.is_harvested]
    return OverviewStats(
        productive_area_m2=sum(land.area_m2 for land in lands if land.status == "active"),
        vacant_area_m2=sum(land.area_m2 for land in lands if land.status == "vacant"),
        active_crops=sum(1 for p in productions if p.is_active),
        total_harvest_kg=sum(p.harvest_yield_kg or 0.0 for p in harvested),
        harvested_count=len(harvested),
        production_count=len(productions),
    )


def ongoing_activities(activities: Sequence[Activity], limit: int = 5) -> List[Activity]:
    return [a for a in activities if a.status != "completed"][:limit]


def monthly_yield(productions: Sequence[Production], now: datetime, months: int = 6) -> List[MonthlyYield]:
    """
    Harvest yield per calendar month over the last `months` months,
    oldest first. Months without harvests are present with 0.
    """
    start, end = month_window(now, months)
    harvested = within_range(productions, lambda p: p.harvest_date, start, end)
    totals = group_sum(
        harvested,
        key=lambda p: start_of_month(parse_date(p.harvest_date)),
        measure=lambda p: p.harvest_yield_kg,
    )

    buckets = []
    for offset in range(months):
        month_start = start_of_month(shift_months(start, offset))
        total = totals.get(month_start, GroupTotal()).total
        buckets.append(
            MonthlyYield(
                month=month_start.strftime("%b"),
                month_start=month_start,
                yield_kg=round_half_up(total),
            )
        )
    return buckets


def commodity_summaries(
    productions: Sequence[Production],
    now: datetime,
    recent_months: int = 3,
) -> List[CommoditySummary]:
    """
    Per-commodity yield cards: harvests in the last `recent_months` months
    against everything harvested before that.
    """
    cutoff = shift_months(parse_date(now), -recent_months)

    def counted_yield(p: Production) -> float | None:
        if p.is_harvested and p.harvest_yield_kg:
            return p.harvest_yield_kg
        return None

    def is_recent(p: Production) -> bool:
        harvested_on = parse_date(p.harvest_date)
        return harvested_on is not None and harvested_on >= cutoff

    def commodity(p: Production) -> str:
        return p.commodity

    recent = group_sum(
        productions,
        key=commodity,
        measure=lambda p: counted_yield(p) if is_recent(p) else None,
    )
    previous = group_sum(
        productions,
        key=commodity,
        measure=lambda p: None if is_recent(p) else counted_yield(p),
    )

    summaries = []
    for name, group in recent.items():
        previous_total = previous[name].total
        summaries.append(
            CommoditySummary(
                commodity=name,
                recent_yield_kg=group.total,
                previous_yield_kg=previous_total,
                count=group.count,
                trend=compute_trend(group.total, previous_total),
            )
        )
    return summaries


def _planting_period(p: Production) -> str:
    planted = parse_date(p.planting_date)
    if planted is None:
        return "Unknown"
    return planted.strftime("%b %Y")


def yield_by_period(productions: Sequence[Production], limit: int = 6) -> Dict[str, float]:
    """Harvested yield grouped by planting month ("Jun 2024"), last `limit` groups."""
    harvested = [p for p in productions if p.is_harvested]
    totals = group_sum(harvested, key=_planting_period, measure=lambda p: p.harvest_yield_kg)
    periods = list(totals.items())[-limit:] if limit > 0 else []
    return {period: group.total for period, group in periods}


def yield_by_commodity(productions: Sequence[Production]) -> Dict[str, float]:
    harvested = [p for p in productions if p.is_harvested]
    totals = group_sum(harvested, key=lambda p: p.commodity, measure=lambda p: p.harvest_yield_kg)
    return {name: group.total for name, group in totals.items()}
