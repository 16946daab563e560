"""
Persistence interface for impact events and per-user gamification records.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence

from app.schemas.impact_schemas import EventStatus, ImpactEvent, UserGamification

ACTIVE_ONLY = (EventStatus.ACTIVE,)


class ImpactStore(Protocol):
    """Storage for the append-only event log and the gamification records."""

    def insert_event(self, event: ImpactEvent) -> ImpactEvent:
        """Append a new event."""

    def get_event(self, event_id: str) -> Optional[ImpactEvent]:
        """Return one event, whatever its status."""

    def set_event_status(self, event_id: str, status: EventStatus) -> ImpactEvent:
        """Change the status of an existing event and return it."""

    def list_events(
        self,
        user_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        statuses: Sequence[EventStatus] = ACTIVE_ONLY,
        limit: Optional[int] = None,
    ) -> List[ImpactEvent]:
        """Return a user's events with since <= created_at < until, newest first."""

    def get_profile(self, user_id: str) -> Optional[UserGamification]:
        """Return the user's gamification record, if any."""

    def save_profile(self, profile: UserGamification) -> UserGamification:
        """Create or replace the user's gamification record."""


class InMemoryImpactStore:
    """Process-local store. Returns copies so callers never alias stored rows."""

    def __init__(self):
        self._events: Dict[str, ImpactEvent] = {}
        self._profiles: Dict[str, UserGamification] = {}
        self._lock = threading.Lock()

    def insert_event(self, event: ImpactEvent) -> ImpactEvent:
        with self._lock:
            if event.id in self._events:
                raise ValueError(f"Duplicate impact event id {event.id}")
            self._events[event.id] = event.model_copy(deep=True)
        return event

    def get_event(self, event_id: str) -> Optional[ImpactEvent]:
        event = self._events.get(event_id)
        return event.model_copy(deep=True) if event else None

    def set_event_status(self, event_id: str, status: EventStatus) -> ImpactEvent:
        with self._lock:
            updated = self._events[event_id].model_copy(update={"status": status})
            self._events[event_id] = updated
        return updated.model_copy(deep=True)

    def list_events(
        self,
        user_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        statuses: Sequence[EventStatus] = ACTIVE_ONLY,
        limit: Optional[int] = None,
    ) -> List[ImpactEvent]:
        events = [
            e for e in self._events.values()
            if e.user_id == user_id
            and e.status in statuses
            and (since is None or e.created_at >= since)
            and (until is None or e.created_at < until)
        ]
        events.sort(key=lambda e: e.created_at, reverse=True)
        if limit is not None:
            events = events[:limit]
        return [e.model_copy(deep=True) for e in events]

    def get_profile(self, user_id: str) -> Optional[UserGamification]:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    def save_profile(self, profile: UserGamification) -> UserGamification:
        with self._lock:
            self._profiles[profile.user_id] = profile.model_copy(deep=True)
        return profile
