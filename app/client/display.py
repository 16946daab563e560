"""
Presentation helpers for server-delivered impact state.

Nothing here derives gamification values; it only shapes what the service
returned for display.
"""

from typing import Dict, Iterable, Iterator, Optional, Set

from app.client.impact_client import ImpactApiClient, ImpactApiError
from app.schemas.impact_schemas import WeeklyProgress
from app.schemas.recipe_schemas import Recipe


def progress_bar_percentage(progress: WeeklyProgress) -> float:
    """The stored percentage can exceed 100; a progress bar cannot."""
    return max(0.0, min(progress.percentage, 100.0))


def count_up(target: float, steps: int = 30) -> Iterator[float]:
    """
    Values for a count-up animation from 0 to target.

    The last value is exactly target, so the animation always settles on the
    number the server sent.
    """
    if steps < 1:
        raise ValueError("steps must be at least 1")
    for i in range(1, steps):
        yield target * i / steps
    yield target


class FavoriteOverlay:
    """
    Pending favorite toggles layered over the last server-confirmed set.

    A toggle is shown immediately; once a fetch returns a set that already
    agrees with the toggle, the pending entry is dropped. Pending entries are
    never written back as confirmed state.
    """

    def __init__(self, confirmed: Optional[Iterable[str]] = None):
        self._confirmed: Set[str] = set(confirmed or ())
        self._pending: Dict[str, bool] = {}

    def toggle(self, recipe_id: str) -> bool:
        """Flip the displayed state and return the new value."""
        new_value = not self.is_favorite(recipe_id)
        if new_value == (recipe_id in self._confirmed):
            self._pending.pop(recipe_id, None)
        else:
            self._pending[recipe_id] = new_value
        return new_value

    def is_favorite(self, recipe_id: str) -> bool:
        if recipe_id in self._pending:
            return self._pending[recipe_id]
        return recipe_id in self._confirmed

    def reconcile(self, server_favorites: Iterable[str]) -> Set[str]:
        """Adopt an authoritative fetch and return the set to display."""
        self._confirmed = set(server_favorites)
        self._pending = {
            recipe_id: wanted
            for recipe_id, wanted in self._pending.items()
            if wanted != (recipe_id in self._confirmed)
        }
        return self.visible()

    def rollback(self, recipe_id: str) -> None:
        """Discard a pending toggle, e.g. after the save request failed."""
        self._pending.pop(recipe_id, None)

    def visible(self) -> Set[str]:
        shown = set(self._confirmed)
        for recipe_id, wanted in self._pending.items():
            if wanted:
                shown.add(recipe_id)
            else:
                shown.discard(recipe_id)
        return shown

    @property
    def pending(self) -> Dict[str, bool]:
        return dict(self._pending)


async def refresh_favorites(api: ImpactApiClient, overlay: FavoriteOverlay, user_id: str) -> Set[str]:
    """Fetch the authoritative favorites and reconcile the overlay against them."""
    favorites = await api.get_favorites(user_id)
    return overlay.reconcile(recipe.name for recipe in favorites)


async def star_recipe(
    api: ImpactApiClient,
    overlay: FavoriteOverlay,
    user_id: str,
    recipe: Recipe,
) -> None:
    """
    Show the star at once, then save it. A failed save rolls the star back
    and re-raises ImpactApiError. Favorites are keyed by recipe name.
    """
    if overlay.is_favorite(recipe.name):
        return
    overlay.toggle(recipe.name)
    try:
        await api.favorite_recipe(user_id, recipe)
    except ImpactApiError:
        overlay.rollback(recipe.name)
        raise
