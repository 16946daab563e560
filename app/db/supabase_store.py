"""
Supabase-backed impact store.

Tables:
    impact_events      one row per event; rows are never deleted
    user_gamification  one row per user (streak, goal, earned badges)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from supabase import Client, create_client

from app.core.config import Settings
from app.db.impact_store import ACTIVE_ONLY
from app.schemas.impact_schemas import EventStatus, ImpactEvent, UserGamification

EVENTS_TABLE = "impact_events"
GAMIFICATION_TABLE = "user_gamification"


def create_supabase_client(settings: Settings) -> Client:
    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set when IMPACT_STORE=supabase")
    return create_client(settings.supabase_url, settings.supabase_key)


class SupabaseImpactStore:
    def __init__(self, client: Client):
        self.client = client

    def insert_event(self, event: ImpactEvent) -> ImpactEvent:
        row = event.model_dump(mode="json")
        result = self.client.table(EVENTS_TABLE).insert(row).execute()
        if not result.data:
            raise RuntimeError(f"Supabase returned no row for inserted event {event.id}")
        return ImpactEvent.model_validate(result.data[0])

    def get_event(self, event_id: str) -> Optional[ImpactEvent]:
        result = self.client.table(EVENTS_TABLE)\
            .select("*")\
            .eq("id", event_id)\
            .execute()
        if not result.data:
            return None
        return ImpactEvent.model_validate(result.data[0])

    def set_event_status(self, event_id: str, status: EventStatus) -> ImpactEvent:
        result = self.client.table(EVENTS_TABLE)\
            .update({"status": status.value})\
            .eq("id", event_id)\
            .execute()
        if not result.data:
            raise RuntimeError(f"Supabase returned no row for updated event {event_id}")
        return ImpactEvent.model_validate(result.data[0])

    def list_events(
        self,
        user_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        statuses: Sequence[EventStatus] = ACTIVE_ONLY,
        limit: Optional[int] = None,
    ) -> List[ImpactEvent]:
        query = self.client.table(EVENTS_TABLE)\
            .select("*")\
            .eq("user_id", user_id)\
            .in_("status", [s.value for s in statuses])
        if since is not None:
            query = query.gte("created_at", since.isoformat())
        if until is not None:
            query = query.lt("created_at", until.isoformat())
        query = query.order("created_at", desc=True)
        if limit is not None:
            query = query.limit(limit)

        result = query.execute()
        return [ImpactEvent.model_validate(row) for row in result.data or []]

    def get_profile(self, user_id: str) -> Optional[UserGamification]:
        result = self.client.table(GAMIFICATION_TABLE)\
            .select("*")\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            return None
        return UserGamification.model_validate(_drop_nulls(result.data[0]))

    def save_profile(self, profile: UserGamification) -> UserGamification:
        row = profile.model_dump(mode="json")
        self.client.table(GAMIFICATION_TABLE)\
            .upsert(row, on_conflict="user_id")\
            .execute()
        return profile


def _drop_nulls(row: Dict[str, Any]) -> Dict[str, Any]:
    # Nullable columns fall back to the model defaults (e.g. badges = {}).
    return {k: v for k, v in row.items() if v is not None}
