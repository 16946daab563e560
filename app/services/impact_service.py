"""
Impact Service

Logs impact events and keeps each user's streak, badges and weekly goal in
step with the event log. Everything that reads prior state and writes new
state for a user runs under that user's lock.
"""

import asyncio
import logging
import uuid
import math
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Callable, Dict, List, Optional

from ..core.errors import (
    EventNotFoundError,
    ImpactValidationError,
    InvalidStatusTransition,
)
from ..db.impact_store import ImpactStore
from ..schemas.impact_schemas import (
    BadgeInfo,
    BadgeType,
    EventStatus,
    GamificationResponse,
    GamificationUpdate,
    ImpactCalculationResponse,
    ImpactEstimateResponse,
    ImpactEvent,
    ImpactHistoryResponse,
    ImpactSource,
    ImpactTotals,
    IngredientInput,
    UserGamification,
    WeeklyProgress,
    WeeklySummaryResponse,
)
from .badge_engine import BadgeEngine
from .impact_calculator import ImpactCalculator
from .streak_tracker import advance_streak, replay_streak
from .weekly_goal_tracker import (
    compare_weeks,
    get_week_start,
    summarize,
    utc_date,
    week_bounds,
    weekly_progress,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ImpactService:
    """
    Service for logging impact events and deriving gamification state.

    Handles:
    - Impact calculation and event logging
    - Streak, badge and weekly goal updates triggered by each event
    - Weekly/all-time summaries and event history
    - Reversing or deleting events
    """

    def __init__(
        self,
        store: ImpactStore,
        calculator: Optional[ImpactCalculator] = None,
        badge_engine: Optional[BadgeEngine] = None,
        default_weekly_goal_kg: float = 2.0,
        max_weekly_goal_kg: float = 100.0,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.calculator = calculator or ImpactCalculator()
        self.badge_engine = badge_engine or BadgeEngine()
        self.default_weekly_goal_kg = default_weekly_goal_kg
        self.max_weekly_goal_kg = max_weekly_goal_kg
        self.clock = clock
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_holders: Dict[str, int] = {}

    @asynccontextmanager
    async def _user_lock(self, user_id: str) -> AsyncIterator[None]:
        """Serialize state changes per user. A lock is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_holders[user_id] = self._lock_holders.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_holders[user_id] -= 1
            if not self._lock_holders[user_id]:
                del self._lock_holders[user_id]
                del self._locks[user_id]

    def _profile(self, user_id: str) -> UserGamification:
        profile = self.store.get_profile(user_id)
        if profile is None:
            profile = UserGamification(user_id=user_id, weekly_goal_kg=self.default_weekly_goal_kg)
        return profile

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------

    def estimate_impact(self, ingredients: List[IngredientInput]) -> ImpactEstimateResponse:
        """Preview totals and breakdown without touching the store."""
        totals, breakdown = self.calculator.calculate_total_impact(ingredients)
        return ImpactEstimateResponse(totals=totals, breakdown=breakdown)

    async def calculate_impact(
        self,
        user_id: str,
        ingredients: List[IngredientInput],
        source: ImpactSource = ImpactSource.RECIPE,
        source_id: Optional[str] = None,
    ) -> ImpactCalculationResponse:
        """
        Calculate impact for the ingredients, log it as a new event, then
        update streak, badges and weekly progress from that same event.

        The profile update is computed before anything is written, so a
        failure while evaluating leaves no event behind.
        """
        if not ingredients:
            raise ImpactValidationError("At least one ingredient is required")

        totals, breakdown = self.calculator.calculate_total_impact(ingredients)

        async with self._user_lock(user_id):
            now = self.clock()
            event = ImpactEvent(
                id=str(uuid.uuid4()),
                user_id=user_id,
                source=source,
                source_id=source_id,
                ingredients=breakdown,
                total_waste_kg=totals.waste_prevented_kg,
                total_cost_usd=totals.money_saved_usd,
                total_co2_kg=totals.co2_avoided_kg,
                status=EventStatus.ACTIVE,
                created_at=now,
            )

            profile = self._profile(user_id)
            streak = advance_streak(profile.streak_info(utc_date(now)), utc_date(event.created_at))
            profile.current_streak = streak.current
            profile.longest_streak = streak.longest
            profile.last_active_date = streak.last_active

            new_badges = self.badge_engine.evaluate(
                profile.badges,
                self._lifetime_metrics(user_id, profile.current_streak, pending=event),
                now,
            )
            progress = self.update_weekly_progress(user_id, event, profile.weekly_goal_kg)
            profile.updated_at = now

            self.store.insert_event(event)
            try:
                self.store.save_profile(profile)
            except Exception:
                logger.error("Saving gamification for %s failed, retiring event %s", user_id, event.id)
                self.store.set_event_status(event.id, EventStatus.DELETED)
                raise
            logger.info(
                "Logged impact event %s for user %s (%s, %.4fkg)",
                event.id, user_id, source.value, totals.waste_prevented_kg,
            )

        return ImpactCalculationResponse(
            event_id=event.id,
            totals=totals,
            breakdown=breakdown,
            gamification=GamificationUpdate(
                streak=streak.current,
                is_new_streak_record=streak.is_new_record,
                new_badges=new_badges,
                weekly_progress=progress,
            ),
            message=_summary_message(totals, new_badges),
        )

    def update_weekly_progress(
        self,
        user_id: str,
        event: ImpactEvent,
        goal_kg: float,
    ) -> WeeklyProgress:
        """Progress for the week containing the event's created_at, counting the event itself."""
        week_start = get_week_start(utc_date(event.created_at))
        since, until = week_bounds(week_start)
        events = _with_pending(self.store.list_events(user_id, since=since, until=until), event)
        return weekly_progress(summarize(events, "this_week").waste_kg, goal_kg, week_start)

    def _lifetime_metrics(
        self,
        user_id: str,
        current_streak: int,
        pending: Optional[ImpactEvent] = None,
    ) -> Dict[BadgeType, float]:
        events = _with_pending(self.store.list_events(user_id), pending)
        all_time = summarize(events, "all_time")
        return {
            BadgeType.WASTE_SAVER: all_time.waste_kg,
            BadgeType.MONEY_SAVER: all_time.money_usd,
            BadgeType.CARBON_HERO: all_time.co2_kg,
            BadgeType.STREAK_MASTER: current_streak,
            BadgeType.RECIPE_CHEF: sum(1 for e in events if e.source == ImpactSource.RECIPE),
            BadgeType.COMMUNITY_HERO: sum(1 for e in events if e.source == ImpactSource.FRIDGE_SHARE),
        }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_weekly_summary(self, user_id: str) -> WeeklySummaryResponse:
        """This week, last week, all time, goal progress and week-over-week change."""
        today = utc_date(self.clock())
        this_week_start = get_week_start(today)
        last_week_start = this_week_start - timedelta(days=7)

        events = self.store.list_events(user_id)
        this_week = summarize(
            events, "this_week", this_week_start, this_week_start + timedelta(days=6)
        )
        last_week = summarize(
            events, "last_week", last_week_start, last_week_start + timedelta(days=6)
        )
        all_time = summarize(events, "all_time")

        profile = self._profile(user_id)
        return WeeklySummaryResponse(
            user_id=user_id,
            this_week=this_week,
            last_week=last_week,
            all_time=all_time,
            weekly_goal=weekly_progress(this_week.waste_kg, profile.weekly_goal_kg, this_week_start),
            comparison=compare_weeks(this_week, last_week),
        )

    async def get_gamification_state(self, user_id: str) -> GamificationResponse:
        """Streak, earned badges, the closest unearned badge and goal progress."""
        today = utc_date(self.clock())
        week_start = get_week_start(today)
        profile = self._profile(user_id)
        metrics = self._lifetime_metrics(user_id, profile.current_streak)

        since, until = week_bounds(week_start)
        this_week = summarize(self.store.list_events(user_id, since=since, until=until), "this_week")

        return GamificationResponse(
            user_id=user_id,
            streak=profile.streak_info(today),
            badges=self.badge_engine.earned_badges(profile.badges, metrics),
            weekly_goal=weekly_progress(this_week.waste_kg, profile.weekly_goal_kg, week_start),
            next_badge_progress=self.badge_engine.next_badge(profile.badges, metrics),
        )

    async def get_history(
        self,
        user_id: str,
        limit: int = 10,
        include_inactive: bool = False,
    ) -> ImpactHistoryResponse:
        statuses = list(EventStatus) if include_inactive else [EventStatus.ACTIVE]
        events = self.store.list_events(user_id, statuses=statuses, limit=limit)
        return ImpactHistoryResponse(events=events, count=len(events))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def update_weekly_goal(self, user_id: str, goal_kg: float) -> UserGamification:
        """Replace the user's weekly goal."""
        if not math.isfinite(goal_kg):
            raise ImpactValidationError("Weekly goal must be a finite number")
        if goal_kg <= 0:
            raise ImpactValidationError("Weekly goal must be greater than 0kg")
        if goal_kg > self.max_weekly_goal_kg:
            raise ImpactValidationError(
                f"Weekly goal must be at most {self.max_weekly_goal_kg:g}kg"
            )

        async with self._user_lock(user_id):
            profile = self._profile(user_id)
            profile.weekly_goal_kg = goal_kg
            profile.updated_at = self.clock()
            return self.store.save_profile(profile)

    async def reverse_event(self, user_id: str, event_id: str) -> ImpactEvent:
        return await self._retire_event(user_id, event_id, EventStatus.REVERSED)

    async def delete_event(self, user_id: str, event_id: str) -> ImpactEvent:
        return await self._retire_event(user_id, event_id, EventStatus.DELETED)

    async def _retire_event(
        self,
        user_id: str,
        event_id: str,
        status: EventStatus,
    ) -> ImpactEvent:
        """
        Move an active event to reversed/deleted and rebuild the streak from
        the remaining active events. Earned badges are kept.
        """
        async with self._user_lock(user_id):
            event = self.store.get_event(event_id)
            if event is None or event.user_id != user_id:
                raise EventNotFoundError(event_id)
            if event.status != EventStatus.ACTIVE:
                raise InvalidStatusTransition(event_id, event.status.value, status.value)

            event = self.store.set_event_status(event_id, status)
            logger.info("Impact event %s for user %s is now %s", event_id, user_id, status.value)

            streak = replay_streak(utc_date(e.created_at) for e in self.store.list_events(user_id))
            profile = self._profile(user_id)
            profile.current_streak = streak.current
            profile.longest_streak = streak.longest
            profile.last_active_date = streak.last_active
            profile.updated_at = self.clock()
            self.store.save_profile(profile)

        return event


def _with_pending(events: List[ImpactEvent], pending: Optional[ImpactEvent]) -> List[ImpactEvent]:
    if pending is None or any(e.id == pending.id for e in events):
        return events
    return [pending] + events


def _summary_message(totals: ImpactTotals, new_badges: List[BadgeInfo]) -> str:
    message = (
        f"You saved {totals.waste_prevented_kg:.2f}kg of food, "
        f"${totals.money_saved_usd:.2f} and {totals.co2_avoided_kg:.2f}kg of CO₂!"
    )
    if new_badges:
        earned = ", ".join(f"{b.name} ({b.tier.value})" for b in new_badges)
        message += f" New badge: {earned}."
    return message
