"""
HTTP client for the impact-tracking, recipe and FridgeShare API.

Construct one ImpactApiClient per app session and pass it to the code that
needs it. Read calls (estimate, summary, badges, history, search, favorites,
listings) fall back to zero-valued or empty defaults when the network or the
server fails; write calls (calculate, goal update, recipe generation, save,
favorite, listing create/claim/delete) raise ImpactApiError carrying the
server's message.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, List, Optional, Sequence, Union

import httpx

from app.core.config import settings
from app.schemas.impact_schemas import (
    GamificationResponse,
    ImpactCalculationResponse,
    ImpactEstimateResponse,
    ImpactHistoryResponse,
    ImpactSource,
    ImpactTotals,
    IngredientInput,
    PeriodSummary,
    StreakInfo,
    WeeklyGoalUpdateResponse,
    WeeklyProgress,
    WeeklySummaryResponse,
)
from app.schemas.fridge_schemas import ClaimRequest, FridgeListing, FridgeListingCreate, ListingStatus
from app.schemas.recipe_schemas import Recipe, legacy_payload, parse_generated_recipe, parse_recipe

logger = logging.getLogger(__name__)

IngredientLike = Union[IngredientInput, dict]

DEFAULT_GOAL_KG = 2.0


class ImpactApiError(Exception):
    """A failed call whose message can be shown to the user as-is."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or fallback
    if not isinstance(body, dict):
        return fallback

    detail = body.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list):
        # FastAPI request validation errors
        return "; ".join(str(item.get("msg", item)) for item in detail if isinstance(item, dict)) or fallback
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    return body.get("message") or fallback


def _today() -> date:
    return datetime.now(timezone.utc).date()


class ImpactApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        write_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        today: Callable[[], date] = _today,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.write_timeout = httpx.Timeout(write_timeout or settings.client_write_timeout_s)
        self.read_timeout = httpx.Timeout(read_timeout or settings.client_read_timeout_s)
        self.upload_timeout = httpx.Timeout(settings.client_upload_timeout_s)
        self._http = http_client or httpx.AsyncClient(headers={"Accept": "application/json"})
        self._today = today

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ImpactApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        timeout: httpx.Timeout,
        fallback_message: str,
        **kwargs: Any,
    ) -> Any:
        response = await self._http.request(method, f"{self.base_url}{path}", timeout=timeout, **kwargs)
        if response.status_code >= 400:
            raise ImpactApiError(_error_message(response, fallback_message), response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise ImpactApiError(fallback_message, response.status_code) from exc

    # ---------- Impact Tracking ----------

    async def calculate_impact(
        self,
        user_id: str,
        ingredients: Sequence[IngredientLike],
        source: ImpactSource = ImpactSource.RECIPE,
        source_id: Optional[str] = None,
    ) -> ImpactCalculationResponse:
        """Calculate and log impact. Raises ImpactApiError on any failure."""
        body = {
            "user_id": user_id,
            "ingredients": [
                IngredientInput.model_validate(i).model_dump(exclude_none=True) for i in ingredients
            ],
            "source": ImpactSource(source).value,
        }
        if source_id:
            body["source_id"] = source_id

        try:
            data = await self._request(
                "POST", "/impact/calculate", self.write_timeout,
                "Failed to calculate impact", json=body,
            )
            return ImpactCalculationResponse.model_validate(data)
        except httpx.TimeoutException as exc:
            raise ImpactApiError("Calculating impact timed out. Please try again.") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Calculate impact request failed: %s", exc)
            raise ImpactApiError("Failed to calculate impact") from exc

    async def estimate_impact(self, ingredients: Sequence[IngredientLike]) -> ImpactEstimateResponse:
        """Preview impact; zero totals on failure."""
        body = [IngredientInput.model_validate(i).model_dump(exclude_none=True) for i in ingredients]
        try:
            data = await self._request(
                "POST", "/impact/estimate", self.read_timeout,
                "Failed to estimate impact", json=body,
            )
            return ImpactEstimateResponse.model_validate(data)
        except (httpx.HTTPError, ImpactApiError, ValueError) as exc:
            logger.warning("Estimate impact failed, using zero totals: %s", exc)
            return ImpactEstimateResponse(
                totals=ImpactTotals(waste_prevented_kg=0, money_saved_usd=0, co2_avoided_kg=0),
                breakdown=[],
            )

    def _empty_weekly_goal(self) -> WeeklyProgress:
        today = self._today()
        return WeeklyProgress(
            current_kg=0,
            goal_kg=DEFAULT_GOAL_KG,
            percentage=0,
            week_start=today - timedelta(days=today.weekday()),
        )

    async def get_impact_summary(self, user_id: str) -> WeeklySummaryResponse:
        try:
            data = await self._request(
                "GET", f"/impact/summary/{user_id}", self.read_timeout, "Failed to load summary",
            )
            return WeeklySummaryResponse.model_validate(data)
        except (httpx.HTTPError, ImpactApiError, ValueError) as exc:
            logger.warning("Impact summary for %s unavailable, using defaults: %s", user_id, exc)
            return WeeklySummaryResponse(
                user_id=user_id,
                this_week=PeriodSummary(period="this_week"),
                last_week=PeriodSummary(period="last_week"),
                all_time=PeriodSummary(period="all_time"),
                weekly_goal=self._empty_weekly_goal(),
                comparison={},
            )

    async def get_gamification(self, user_id: str) -> GamificationResponse:
        try:
            data = await self._request(
                "GET", f"/impact/badges/{user_id}", self.read_timeout, "Failed to load badges",
            )
            return GamificationResponse.model_validate(data)
        except (httpx.HTTPError, ImpactApiError, ValueError) as exc:
            logger.warning("Gamification state for %s unavailable, using defaults: %s", user_id, exc)
            return GamificationResponse(
                user_id=user_id,
                streak=StreakInfo(),
                badges=[],
                weekly_goal=self._empty_weekly_goal(),
            )

    async def update_weekly_goal(self, user_id: str, goal_kg: float) -> WeeklyGoalUpdateResponse:
        """Raises ImpactApiError with the server's message on failure."""
        try:
            data = await self._request(
                "PUT", "/impact/goal", self.read_timeout, "Failed to update goal",
                json={"user_id": user_id, "weekly_goal_kg": goal_kg},
            )
            return WeeklyGoalUpdateResponse.model_validate(data)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Update weekly goal request failed: %s", exc)
            raise ImpactApiError("Failed to update goal") from exc

    async def get_impact_history(self, user_id: str, limit: int = 10) -> ImpactHistoryResponse:
        try:
            data = await self._request(
                "GET", f"/impact/history/{user_id}", self.read_timeout, "Failed to load history",
                params={"limit": limit},
            )
            return ImpactHistoryResponse.model_validate(data)
        except (httpx.HTTPError, ImpactApiError, ValueError) as exc:
            logger.warning("Impact history for %s unavailable: %s", user_id, exc)
            return ImpactHistoryResponse(events=[], count=0)

    # ---------- Recipes ----------

    async def generate_recipe(
        self,
        image: bytes,
        content_type: str = "image/jpeg",
        filename: str = "fridge_photo.jpg",
    ) -> Recipe:
        """
        Send a fridge photo to the recipe generator.

        Raises ImpactApiError on transport/server failure and
        RecipeSchemaMismatch when the answer is not a recipe.
        """
        try:
            data = await self._request(
                "POST", "/upload-image/", self.upload_timeout,
                "Failed to process recipe request",
                files={"file": (filename, image, content_type)},
            )
        except httpx.HTTPError as exc:
            logger.warning("Recipe generation request failed: %s", exc)
            raise ImpactApiError("Failed to process recipe request") from exc
        return parse_generated_recipe(data)

    async def search_recipes(self, ingredients: Sequence[str]) -> List[Recipe]:
        """
        Recipes matching any of the ingredients. An unreachable server gives
        an empty list; a malformed recipe raises RecipeSchemaMismatch.
        """
        try:
            data = await self._request(
                "GET", "/recipes/search", self.read_timeout, "Failed to search recipes",
                params={"ingredients": ",".join(ingredients)},
            )
        except (httpx.HTTPError, ImpactApiError, ValueError) as exc:
            logger.warning("Recipe search failed: %s", exc)
            return []
        if not isinstance(data, list):
            return []
        return [parse_recipe(raw) for raw in data]

    async def save_recipe(self, recipe: Recipe) -> None:
        try:
            await self._request(
                "POST", "/recipes/save", self.write_timeout, "Failed to save recipe",
                json=legacy_payload(recipe),
            )
        except httpx.HTTPError as exc:
            logger.warning("Save recipe request failed: %s", exc)
            raise ImpactApiError("Failed to save recipe") from exc

    async def favorite_recipe(self, user_id: str, recipe: Recipe) -> None:
        """Star a recipe for the user. Raises ImpactApiError on failure."""
        try:
            await self._request(
                "POST", "/recipes/favorite", self.write_timeout, "Failed to favorite recipe",
                json={"user_id": user_id, **legacy_payload(recipe)},
            )
        except httpx.HTTPError as exc:
            logger.warning("Favorite recipe request failed: %s", exc)
            raise ImpactApiError("Failed to favorite recipe") from exc

    async def get_favorites(self, user_id: str) -> List[Recipe]:
        """
        The user's starred recipes. An unreachable server gives an empty
        list; a malformed recipe raises RecipeSchemaMismatch.
        """
        try:
            data = await self._request(
                "GET", "/recipes/favorite", self.read_timeout, "Failed to load favorites",
                params={"user_id": user_id},
            )
        except (httpx.HTTPError, ImpactApiError) as exc:
            logger.warning("Favorites for %s unavailable: %s", user_id, exc)
            return []
        if not isinstance(data, list):
            return []
        return [parse_recipe(raw) for raw in data]

    # ---------- Fridge Share ----------

    async def create_fridge_listing(self, listing: FridgeListingCreate) -> FridgeListing:
        """Post leftovers to the feed. Raises ImpactApiError on failure."""
        try:
            data = await self._request(
                "POST", "/fridge-listings", self.write_timeout, "Failed to create listing",
                json=listing.model_dump(mode="json", exclude_none=True),
            )
            return FridgeListing.model_validate(data)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Create listing request failed: %s", exc)
            raise ImpactApiError("Failed to create listing") from exc

    async def get_fridge_listings(
        self,
        status: ListingStatus = ListingStatus.AVAILABLE,
    ) -> List[FridgeListing]:
        try:
            data = await self._request(
                "GET", "/fridge-listings", self.read_timeout, "Failed to load listings",
                params={"status": ListingStatus(status).value},
            )
            return [FridgeListing.model_validate(row) for row in data or []]
        except (httpx.HTTPError, ImpactApiError, ValueError, TypeError) as exc:
            logger.warning("Fridge listings unavailable: %s", exc)
            return []

    async def get_my_fridge_listings(self, user_id: str) -> List[FridgeListing]:
        try:
            data = await self._request(
                "GET", "/fridge-listings/mine", self.read_timeout, "Failed to load listings",
                params={"user_id": user_id},
            )
            return [FridgeListing.model_validate(row) for row in data or []]
        except (httpx.HTTPError, ImpactApiError, ValueError, TypeError) as exc:
            logger.warning("Fridge listings for %s unavailable: %s", user_id, exc)
            return []

    async def get_fridge_listing(self, listing_id: str) -> Optional[FridgeListing]:
        try:
            data = await self._request(
                "GET", f"/fridge-listings/{listing_id}", self.read_timeout, "Failed to load listing",
            )
            return FridgeListing.model_validate(data)
        except (httpx.HTTPError, ImpactApiError, ValueError) as exc:
            logger.warning("Fridge listing %s unavailable: %s", listing_id, exc)
            return None

    async def claim_fridge_listing(
        self,
        listing_id: str,
        claimed_by: str,
        claimed_by_name: str,
    ) -> FridgeListing:
        """Raises ImpactApiError, e.g. when someone else claimed it first (409)."""
        body = ClaimRequest(claimed_by=claimed_by, claimed_by_name=claimed_by_name)
        try:
            data = await self._request(
                "PATCH", f"/fridge-listings/{listing_id}/claim", self.write_timeout,
                "Failed to claim listing", json=body.model_dump(),
            )
            return FridgeListing.model_validate(data)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Claim listing request failed: %s", exc)
            raise ImpactApiError("Failed to claim listing") from exc

    async def delete_fridge_listing(self, listing_id: str, user_id: str) -> None:
        try:
            await self._request(
                "DELETE", f"/fridge-listings/{listing_id}", self.write_timeout,
                "Failed to delete listing", params={"user_id": user_id},
            )
        except httpx.HTTPError as exc:
            logger.warning("Delete listing request failed: %s", exc)
            raise ImpactApiError("Failed to delete listing") from exc
