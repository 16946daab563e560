import logging
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.impact_endpoints import router as impact_router
from app.core.config import Settings, settings as default_settings
from app.db.impact_store import ImpactStore, InMemoryImpactStore
from app.services.badge_engine import BadgeEngine
from app.services.impact_service import ImpactService

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> ImpactStore:
    if settings.impact_store == "supabase":
        from app.db.supabase_store import SupabaseImpactStore, create_supabase_client
        return SupabaseImpactStore(create_supabase_client(settings))
    if settings.impact_store != "memory":
        raise ValueError(f"Unknown IMPACT_STORE {settings.impact_store!r}")
    return InMemoryImpactStore()


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ImpactStore] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title=settings.app_name,
        description="API for food-waste impact calculation, streaks, badges and weekly goals",
        version="1.0.0"
    )

    # --- CORS: allow the mobile/web client to call this API ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],          # tighten in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    service_kwargs = {}
    if clock is not None:
        service_kwargs["clock"] = clock
    app.state.impact_service = ImpactService(
        store if store is not None else build_store(settings),
        badge_engine=BadgeEngine(settings.badge_thresholds),
        default_weekly_goal_kg=settings.default_weekly_goal_kg,
        max_weekly_goal_kg=settings.max_weekly_goal_kg,
        **service_kwargs,
    )
    logger.info("Impact service ready (store=%s)", type(app.state.impact_service.store).__name__)

    app.include_router(impact_router, prefix="/api/v1")

    @app.get("/")
    def read_root():
        return {"message": f"Welcome to the {settings.app_name}!"}

    return app


app = create_app()
