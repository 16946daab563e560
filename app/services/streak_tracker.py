"""
Streak tracking: consecutive calendar days with at least one active impact event.
"""

from datetime import date, timedelta
from typing import Iterable

from ..schemas.impact_schemas import StreakInfo, StreakUpdate


def advance_streak(prior: StreakInfo, event_date: date) -> StreakUpdate:
    """
    Apply one event date to a streak.

    - same day as last_active (or earlier): current/longest unchanged
    - exactly one day after last_active: current + 1
    - later, or no prior activity: current restarts at 1
    """
    last_active = prior.last_active

    if last_active is not None and event_date <= last_active:
        # Late-arriving event; the day is already counted.
        return StreakUpdate(
            current=prior.current,
            longest=prior.longest,
            last_active=last_active,
            is_active_today=True,
            is_new_record=False,
        )

    if last_active is not None and event_date - last_active == timedelta(days=1):
        current = prior.current + 1
    else:
        current = 1

    longest = max(prior.longest, current)
    return StreakUpdate(
        current=current,
        longest=longest,
        last_active=event_date,
        is_active_today=True,
        is_new_record=current == longest and current > prior.longest,
    )


def replay_streak(event_dates: Iterable[date]) -> StreakInfo:
    """Rebuild a streak from scratch out of the dates of active events."""
    streak = StreakInfo()
    for event_date in sorted(set(event_dates)):
        update = advance_streak(streak, event_date)
        streak = StreakInfo(
            current=update.current,
            longest=update.longest,
            last_active=update.last_active,
        )
    return streak
