from datetime import date, datetime, timezone

import pytest

from app.schemas.impact_schemas import EventStatus, ImpactEvent, ImpactSource
from app.services.weekly_goal_tracker import (
    compare_weeks,
    get_week_start,
    percent_change,
    summarize,
    week_bounds,
    weekly_progress,
)


def _event(event_id, created_at, waste, status=EventStatus.ACTIVE):
    return ImpactEvent(
        id=event_id,
        user_id="user_1",
        source=ImpactSource.MANUAL,
        ingredients=[],
        total_waste_kg=waste,
        total_cost_usd=waste * 10,
        total_co2_kg=waste * 2,
        status=status,
        created_at=created_at,
    )


@pytest.mark.parametrize("day", [date(2026, 2, 16), date(2026, 2, 18), date(2026, 2, 22)])
def test_week_starts_on_monday(day):
    assert get_week_start(day) == date(2026, 2, 16)


def test_week_bounds_are_utc_midnights():
    start, end = week_bounds(date(2026, 2, 16))
    assert start == datetime(2026, 2, 16, tzinfo=timezone.utc)
    assert end == datetime(2026, 2, 23, tzinfo=timezone.utc)


def test_summarize_counts_only_active_events_in_range():
    events = [
        _event("a", datetime(2026, 2, 16, 0, 0, tzinfo=timezone.utc), 1.0),
        _event("b", datetime(2026, 2, 22, 23, 59, 59, tzinfo=timezone.utc), 0.5),
        _event("c", datetime(2026, 2, 23, 0, 0, tzinfo=timezone.utc), 4.0),
        _event("d", datetime(2026, 2, 18, tzinfo=timezone.utc), 8.0, EventStatus.REVERSED),
        _event("e", datetime(2026, 2, 18, tzinfo=timezone.utc), 8.0, EventStatus.DELETED),
    ]
    summary = summarize(events, "this_week", date(2026, 2, 16), date(2026, 2, 22))
    assert summary.waste_kg == pytest.approx(1.5)
    assert summary.money_usd == pytest.approx(15.0)
    assert summary.co2_kg == pytest.approx(3.0)
    assert summary.event_count == 2

    assert summarize(events, "all_time").event_count == 3


def test_percentage_is_exact_and_unclamped():
    progress = weekly_progress(2.5, 2.0, date(2026, 2, 16))
    assert progress.percentage == 125
    assert progress.percentage == 100 * progress.current_kg / progress.goal_kg


def test_change_undefined_without_last_week_baseline():
    assert percent_change(3.0, 0.0) is None
    assert percent_change(0.0, 0.0) is None
    assert percent_change(0.0, 2.0) == -100.0
    assert percent_change(2.5, 2.0) == 25.0


def test_compare_weeks_omits_metrics_without_baseline():
    this_week = summarize([_event("a", datetime(2026, 2, 18, tzinfo=timezone.utc), 3.0)], "this_week")
    last_week = summarize([], "last_week")
    assert compare_weeks(this_week, last_week) == {}

    last_week = summarize([_event("b", datetime(2026, 2, 11, tzinfo=timezone.utc), 2.0)], "last_week")
    assert compare_weeks(this_week, last_week) == {
        "waste_kg_change": 50.0,
        "money_usd_change": 50.0,
        "co2_kg_change": 50.0,
    }
