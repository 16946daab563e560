"""
Weekly Goal Tracker

ISO-week math and period aggregation over impact events. Weeks run from
Monday 00:00 UTC through Sunday 23:59:59 UTC.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, Optional, Tuple

from ..schemas.impact_schemas import (
    EventStatus,
    ImpactEvent,
    PeriodSummary,
    WeeklyProgress,
)


def get_week_start(target_date: date) -> date:
    """Get the Monday of the week containing target_date."""
    # weekday() returns 0 for Monday, 6 for Sunday
    return target_date - timedelta(days=target_date.weekday())


def week_bounds(week_start: date) -> Tuple[datetime, datetime]:
    """[start, end) of the week as UTC datetimes."""
    start = datetime.combine(week_start, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=7)


def utc_date(moment: datetime) -> date:
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


def summarize(
    events: Iterable[ImpactEvent],
    period: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> PeriodSummary:
    """
    Aggregate the active events among `events`.

    end_date is inclusive. Events outside [start_date, end_date] are skipped
    when the bounds are given.
    """
    waste = cost = co2 = 0.0
    count = 0
    for event in events:
        if event.status != EventStatus.ACTIVE:
            continue
        day = utc_date(event.created_at)
        if start_date is not None and day < start_date:
            continue
        if end_date is not None and day > end_date:
            continue
        waste += event.total_waste_kg
        cost += event.total_cost_usd
        co2 += event.total_co2_kg
        count += 1

    return PeriodSummary(
        period=period,
        waste_kg=round(waste, 4),
        money_usd=round(cost, 4),
        co2_kg=round(co2, 4),
        event_count=count,
        start_date=start_date,
        end_date=end_date,
    )


def weekly_progress(current_kg: float, goal_kg: float, week_start: date) -> WeeklyProgress:
    """percentage is stored unclamped; clamping is a display concern."""
    current_kg = round(current_kg, 4)
    return WeeklyProgress(
        current_kg=current_kg,
        goal_kg=goal_kg,
        percentage=100 * current_kg / goal_kg,
        week_start=week_start,
    )


def percent_change(this_week: float, last_week: float) -> Optional[float]:
    """Week-over-week change, or None when last week has no baseline."""
    if last_week <= 0:
        return None
    return round(100 * (this_week - last_week) / last_week, 1)


def compare_weeks(this_week: PeriodSummary, last_week: PeriodSummary) -> Dict[str, float]:
    """Only metrics with a positive last-week value get a *_change key."""
    comparison = {}
    for key in ("waste_kg", "money_usd", "co2_kg"):
        change = percent_change(getattr(this_week, key), getattr(last_week, key))
        if change is not None:
            comparison[f"{key}_change"] = change
    return comparison
