"""
HTTP surface of the impact tracker.

Logging an event, previewing an estimate, reading summaries, badges and
history, changing the weekly goal, and retiring events all go through the
ImpactService injected into the app.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...core.config import settings
from ...core.errors import (
    EventNotFoundError,
    ImpactValidationError,
    InvalidStatusTransition,
)
from ...schemas.impact_schemas import (
    EventStatusRequest,
    GamificationResponse,
    ImpactCalculationRequest,
    ImpactCalculationResponse,
    ImpactEstimateResponse,
    ImpactEvent,
    ImpactHistoryResponse,
    IngredientInput,
    WeeklyGoalUpdateRequest,
    WeeklyGoalUpdateResponse,
    WeeklySummaryResponse,
)
from ...services.impact_service import ImpactService
from .deps import get_impact_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/impact", tags=["impact"])


def _domain_error(exc: Exception) -> Optional[HTTPException]:
    if isinstance(exc, ImpactValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, EventNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InvalidStatusTransition):
        return HTTPException(status_code=409, detail=str(exc))
    return None


@router.post(
    "/calculate",
    response_model=ImpactCalculationResponse,
    summary="Log the impact of used ingredients",
    description="""
    Turn a list of ingredients into saved weight, money and CO₂, store the
    result as an active event for the user, and advance their streak, badges
    and weekly progress from that event.

    `source` is `recipe` when a recipe was cooked, `fridge_share` when food was
    shared or claimed, and `manual` for anything logged by hand. Missing
    quantities default to 1 and missing units to "piece".
    """
)
async def calculate_impact(
    request: ImpactCalculationRequest,
    service: ImpactService = Depends(get_impact_service),
):
    try:
        return await service.calculate_impact(
            request.user_id,
            request.ingredients,
            request.source,
            request.source_id,
        )
    except Exception as exc:
        mapped = _domain_error(exc)
        if mapped:
            raise mapped from exc
        logger.exception("Failed to calculate impact", extra={"user_id": request.user_id})
        raise HTTPException(status_code=500, detail=f"Error calculating impact: {exc}") from exc


@router.post(
    "/estimate",
    response_model=ImpactEstimateResponse,
    summary="Preview impact without logging",
    description="Same numbers as /calculate, but nothing is stored and no gamification state changes."
)
async def estimate_impact(
    ingredients: List[IngredientInput],
    service: ImpactService = Depends(get_impact_service),
):
    try:
        return service.estimate_impact(ingredients)
    except Exception as exc:
        mapped = _domain_error(exc)
        if mapped:
            raise mapped from exc
        logger.exception("Failed to estimate impact")
        raise HTTPException(status_code=500, detail=f"Error estimating impact: {exc}") from exc


@router.get(
    "/summary/{user_id}",
    response_model=WeeklySummaryResponse,
    summary="Weekly and lifetime totals",
    description="""
    Totals for the current UTC week, the week before and all time, counted
    over active events only, plus progress toward the weekly goal.
    `comparison` has a `*_change` percentage only for metrics that were
    above zero last week.
    """
)
async def get_impact_summary(
    user_id: str,
    service: ImpactService = Depends(get_impact_service),
):
    try:
        return await service.get_weekly_summary(user_id)
    except Exception as exc:
        logger.exception("Failed to fetch impact summary", extra={"user_id": user_id})
        raise HTTPException(status_code=500, detail=f"Error fetching summary: {exc}") from exc


@router.get(
    "/badges/{user_id}",
    response_model=GamificationResponse,
    summary="Streak, badges and goal",
    description="""
    Current and best streak, each earned badge at its top tier with progress
    toward the next one, the closest unearned badge, and this week's goal
    progress.
    """
)
async def get_gamification(
    user_id: str,
    service: ImpactService = Depends(get_impact_service),
):
    try:
        return await service.get_gamification_state(user_id)
    except Exception as exc:
        logger.exception("Failed to fetch gamification state", extra={"user_id": user_id})
        raise HTTPException(status_code=500, detail=f"Error fetching gamification: {exc}") from exc


@router.put(
    "/goal",
    response_model=WeeklyGoalUpdateResponse,
    summary="Set the weekly goal",
    description="Replace the user's weekly target in kg. Must be above zero and no more than the configured maximum."
)
async def update_weekly_goal(
    request: WeeklyGoalUpdateRequest,
    service: ImpactService = Depends(get_impact_service),
):
    try:
        profile = await service.update_weekly_goal(request.user_id, request.weekly_goal_kg)
    except Exception as exc:
        mapped = _domain_error(exc)
        if mapped:
            raise mapped from exc
        logger.exception("Failed to update weekly goal", extra={"user_id": request.user_id})
        raise HTTPException(status_code=500, detail=f"Error updating goal: {exc}") from exc

    return WeeklyGoalUpdateResponse(
        message=f"Weekly goal updated to {profile.weekly_goal_kg:g}kg",
        success=True,
    )


@router.get(
    "/history/{user_id}",
    response_model=ImpactHistoryResponse,
    summary="Recent events",
    description="The user's events, newest first."
)
async def get_impact_history(
    user_id: str,
    limit: int = Query(
        default=settings.history_default_limit,
        ge=1,
        le=settings.history_max_limit,
        description="Maximum number of events",
    ),
    include_inactive: bool = Query(default=False, description="Also return reversed and deleted events"),
    service: ImpactService = Depends(get_impact_service),
):
    try:
        return await service.get_history(user_id, limit, include_inactive)
    except Exception as exc:
        logger.exception("Failed to fetch impact history", extra={"user_id": user_id})
        raise HTTPException(status_code=500, detail=f"Error fetching history: {exc}") from exc


@router.post(
    "/events/{event_id}/reverse",
    response_model=ImpactEvent,
    summary="Reverse an impact event",
    description="Mark an active event as reversed. It stays in history but no longer counts."
)
async def reverse_impact_event(
    event_id: str,
    request: EventStatusRequest,
    service: ImpactService = Depends(get_impact_service),
):
    try:
        return await service.reverse_event(request.user_id, event_id)
    except Exception as exc:
        mapped = _domain_error(exc)
        if mapped:
            raise mapped from exc
        logger.exception("Failed to reverse impact event %s", event_id)
        raise HTTPException(status_code=500, detail=f"Error reversing event: {exc}") from exc


@router.delete(
    "/events/{event_id}",
    response_model=ImpactEvent,
    summary="Delete an impact event",
    description="Mark an active event as deleted. The row is kept; it no longer counts."
)
async def delete_impact_event(
    event_id: str,
    user_id: str = Query(...),
    service: ImpactService = Depends(get_impact_service),
):
    try:
        return await service.delete_event(user_id, event_id)
    except Exception as exc:
        mapped = _domain_error(exc)
        if mapped:
            raise mapped from exc
        logger.exception("Failed to delete impact event %s", event_id)
        raise HTTPException(status_code=500, detail=f"Error deleting event: {exc}") from exc


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "impact-tracking"}
