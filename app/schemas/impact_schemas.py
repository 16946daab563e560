"""
Request, response and record models for impact tracking.
Shared by the API, the service layer, the stores and the HTTP client, so
every side reads and writes the same shapes.
"""

from datetime import datetime, date
from typing import List, Optional, Dict
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum


# =============================================================================
# Enums
# =============================================================================

class ImpactSource(str, Enum):
    """What triggered an impact event."""
    RECIPE = "recipe"
    FRIDGE_SHARE = "fridge_share"
    MANUAL = "manual"


class EventStatus(str, Enum):
    """Lifecycle of an impact event. Only ACTIVE events count toward totals."""
    ACTIVE = "active"
    REVERSED = "reversed"
    DELETED = "deleted"


class BadgeTier(str, Enum):
    """Badge tier levels, in ascending order."""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


class BadgeType(str, Enum):
    """Badge families, each tracking one lifetime metric."""
    WASTE_SAVER = "waste_saver"
    MONEY_SAVER = "money_saver"
    CARBON_HERO = "carbon_hero"
    STREAK_MASTER = "streak_master"
    RECIPE_CHEF = "recipe_chef"
    COMMUNITY_HERO = "community_hero"


TIER_ORDER: List[BadgeTier] = [BadgeTier.BRONZE, BadgeTier.SILVER, BadgeTier.GOLD]


# =============================================================================
# Requests
# =============================================================================

class IngredientInput(BaseModel):
    """
    Single ingredient input for impact calculation.

    quantity and unit stay None when the caller omits them; the aggregator
    fills in the defaults.
    """
    name: str = Field(..., min_length=1, description="Ingredient name (e.g., 'chicken breast', 'tomato')")
    quantity: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False, description="Quantity of the ingredient")
    unit: Optional[str] = Field(default=None, description="Unit of measurement (e.g., 'cups', 'pieces', 'kg')")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("ingredient name must not be blank")
        return v

    @field_validator('unit')
    @classmethod
    def validate_unit(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip().lower()

    model_config = ConfigDict(json_schema_extra={
        "example": {"name": "chicken breast", "quantity": 2, "unit": "pieces"}
    })


class ImpactCalculationRequest(BaseModel):
    """Request body for calculating and logging impact from a list of ingredients."""
    user_id: str = Field(..., min_length=1, description="User ID (Clerk ID or guest ID)")
    ingredients: List[IngredientInput] = Field(..., description="List of ingredients to calculate impact for")
    source: ImpactSource = Field(default=ImpactSource.RECIPE, description="What triggered the event")
    source_id: Optional[str] = Field(default=None, description="Recipe or listing id, when there is one")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "user_id": "user_42",
            "source": "recipe",
            "ingredients": [
                {"name": "tomato", "quantity": 3},
                {"name": "spinach", "quantity": 1, "unit": "bunch"},
                {"name": "rice", "quantity": 200, "unit": "g"}
            ]
        }
    })


class WeeklyGoalUpdateRequest(BaseModel):
    """Body of PUT /impact/goal."""
    user_id: str = Field(..., min_length=1, description="User ID")
    weekly_goal_kg: float = Field(..., allow_inf_nan=False, description="New weekly goal in kg")


class EventStatusRequest(BaseModel):
    """Identifies the owner when reversing an event."""
    user_id: str = Field(..., min_length=1)


# =============================================================================
# Calculation results
# =============================================================================

class IngredientImpact(BaseModel):
    """Estimated savings for one ingredient; never changes once computed."""
    name: str
    quantity: float
    unit: str
    weight_kg: float = Field(..., ge=0, description="Estimated weight in kg")
    cost_usd: float = Field(..., ge=0, description="Estimated cost in USD")
    co2_kg: float = Field(..., ge=0, description="Estimated CO2 equivalent in kg")
    found_in_lookup: bool = Field(default=True, description="False when the default estimate was used")

    model_config = ConfigDict(frozen=True)


class ImpactTotals(BaseModel):
    """Elementwise sum of a breakdown."""
    waste_prevented_kg: float = Field(..., ge=0, description="Total food waste prevented in kg")
    money_saved_usd: float = Field(..., ge=0, description="Total money saved in USD")
    co2_avoided_kg: float = Field(..., ge=0, description="Total CO2 emissions avoided in kg")


class WeeklyProgress(BaseModel):
    """Progress toward weekly goal. percentage is not clamped."""
    current_kg: float = Field(..., description="Waste prevented so far this week, kg")
    goal_kg: float = Field(..., gt=0, description="Weekly goal in kg")
    percentage: float = Field(..., description="100 * current_kg / goal_kg, may exceed 100")
    week_start: date = Field(..., description="Monday of the week")


class BadgeInfo(BaseModel):
    """An earned badge, or the next one within reach."""
    type: BadgeType
    tier: BadgeTier
    name: str = Field(..., description="Display name, e.g. 'Food Saver'")
    description: str
    earned_at: Optional[datetime] = None
    progress: Optional[float] = Field(None, description="Percent of the way to the next tier, below 100")
    next_tier_threshold: Optional[float] = Field(None, description="Metric value that unlocks the next tier")


class GamificationUpdate(BaseModel):
    """What one logged event did to the streak, badges and weekly goal."""
    streak: int = Field(..., description="Current streak after this event, in days")
    is_new_streak_record: bool = Field(default=False, description="This event raised the longest streak")
    new_badges: List[BadgeInfo] = Field(default_factory=list, description="Badges earned by this action")
    weekly_progress: WeeklyProgress


class ImpactCalculationResponse(BaseModel):
    """Body returned by POST /impact/calculate."""
    event_id: str = Field(..., description="Id of the stored event")
    totals: ImpactTotals
    breakdown: List[IngredientImpact] = Field(..., description="One entry per input ingredient, in input order")
    gamification: GamificationUpdate
    message: str = Field(default="Impact logged")


class ImpactEstimateResponse(BaseModel):
    """Preview of an impact calculation; nothing is stored."""
    totals: ImpactTotals
    breakdown: List[IngredientImpact]
    note: str = "This is an estimate. Use /calculate to log this impact."


# =============================================================================
# Summaries
# =============================================================================

class PeriodSummary(BaseModel):
    """Summary of active events in a time period."""
    period: str = Field(..., description="this_week, last_week or all_time")
    waste_kg: float = 0.0
    money_usd: float = 0.0
    co2_kg: float = 0.0
    event_count: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class WeeklySummaryResponse(BaseModel):
    """
    Weekly and all-time summaries.

    comparison only carries a *_change key when last week's value for that
    metric was positive; a missing key means "no baseline", not "no change".
    """
    user_id: str
    this_week: PeriodSummary
    last_week: PeriodSummary
    all_time: PeriodSummary
    weekly_goal: WeeklyProgress
    comparison: Dict[str, float] = Field(default_factory=dict)


# =============================================================================
# Gamification
# =============================================================================

class StreakInfo(BaseModel):
    """Consecutive active days for a user."""
    current: int = Field(default=0, ge=0, description="Current streak in days")
    longest: int = Field(default=0, ge=0, description="Longest streak ever achieved")
    last_active: Optional[date] = Field(None, description="Most recent day with an active event")
    is_active_today: bool = Field(default=False, description="last_active is today (UTC)")


class StreakUpdate(BaseModel):
    """Result of applying one event date to a streak."""
    current: int
    longest: int
    last_active: date
    is_active_today: bool
    is_new_record: bool


class GamificationResponse(BaseModel):
    """Body returned by GET /impact/badges/{user_id}."""
    user_id: str
    streak: StreakInfo
    badges: List[BadgeInfo]
    weekly_goal: WeeklyProgress
    next_badge_progress: Optional[BadgeInfo] = Field(
        None,
        description="Unearned tier with the most progress, if any"
    )


class WeeklyGoalUpdateResponse(BaseModel):
    message: str
    success: bool


# =============================================================================
# Stored records
# =============================================================================

class ImpactEvent(BaseModel):
    """One logged instance of food-waste prevention. Append-only except for status."""
    id: str
    user_id: str
    source: ImpactSource
    source_id: Optional[str] = None
    ingredients: List[IngredientImpact]
    total_waste_kg: float
    total_cost_usd: float
    total_co2_kg: float
    status: EventStatus = EventStatus.ACTIVE
    created_at: datetime


class ImpactHistoryResponse(BaseModel):
    events: List[ImpactEvent]
    count: int


class UserGamification(BaseModel):
    """
    Per-user gamification record.

    badges maps badge type -> tier -> earned_at. A (type, tier) pair appears
    at most once and is never removed.
    """
    user_id: str
    current_streak: int = 0
    longest_streak: int = 0
    last_active_date: Optional[date] = None
    weekly_goal_kg: float = 2.0
    badges: Dict[str, Dict[str, datetime]] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    def streak_info(self, today: date) -> StreakInfo:
        return StreakInfo(
            current=self.current_streak,
            longest=self.longest_streak,
            last_active=self.last_active_date,
            is_active_today=self.last_active_date == today,
        )

    def highest_tier(self, badge_type: BadgeType) -> Optional[BadgeTier]:
        earned = self.badges.get(badge_type.value, {})
        for tier in reversed(TIER_ORDER):
            if tier.value in earned:
                return tier
        return None
