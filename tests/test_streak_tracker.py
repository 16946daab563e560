from datetime import date, timedelta

from app.schemas.impact_schemas import StreakInfo
from app.services.streak_tracker import advance_streak, replay_streak

DAY = timedelta(days=1)


def test_first_event_starts_streak_and_is_record():
    update = advance_streak(StreakInfo(), date(2026, 2, 18))
    assert update.current == 1
    assert update.longest == 1
    assert update.is_new_record is True
    assert update.last_active == date(2026, 2, 18)
    assert update.is_active_today is True


def test_consecutive_day_extends_streak():
    prior = StreakInfo(current=4, longest=6, last_active=date(2026, 2, 17))
    update = advance_streak(prior, date(2026, 2, 18))
    assert update.current == 5
    assert update.longest == 6
    assert update.is_new_record is False


def test_consecutive_day_beyond_longest_is_record():
    prior = StreakInfo(current=4, longest=4, last_active=date(2026, 2, 17))
    update = advance_streak(prior, date(2026, 2, 18))
    assert update.current == 5
    assert update.longest == 5
    assert update.is_new_record is True


def test_same_day_event_changes_nothing():
    prior = StreakInfo(current=3, longest=3, last_active=date(2026, 2, 18))
    update = advance_streak(prior, date(2026, 2, 18))
    assert (update.current, update.longest) == (3, 3)
    assert update.is_new_record is False
    assert update.is_active_today is True


def test_gap_resets_to_one():
    prior = StreakInfo(current=9, longest=9, last_active=date(2026, 2, 15))
    update = advance_streak(prior, date(2026, 2, 18))
    assert update.current == 1
    assert update.longest == 9
    assert update.is_new_record is False


def test_consecutive_days_increase_by_one():
    streak = StreakInfo()
    start = date(2026, 1, 1)
    for i in range(10):
        update = advance_streak(streak, start + i * DAY)
        assert update.current == i + 1
        assert update.longest >= update.current
        streak = StreakInfo(current=update.current, longest=update.longest, last_active=update.last_active)


def test_replay_matches_incremental_and_ignores_duplicates():
    days = [date(2026, 2, 1), date(2026, 2, 2), date(2026, 2, 2), date(2026, 2, 3),
            date(2026, 2, 10), date(2026, 2, 11)]
    streak = replay_streak(reversed(days))
    assert streak.current == 2
    assert streak.longest == 3
    assert streak.last_active == date(2026, 2, 11)


def test_replay_of_nothing_is_empty_streak():
    assert replay_streak([]) == StreakInfo()
