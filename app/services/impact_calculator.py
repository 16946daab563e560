"""
Impact Calculator Service

Estimates the weight, cost and carbon saved for each ingredient and sums them
into event totals. Pure computation: no storage, no clock.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from ..core.errors import ImpactValidationError
from ..data.ingredient_defaults import (
    CONTAINER_UNITS,
    COUNT_UNITS,
    DEFAULT_ESTIMATE,
    INGREDIENT_FACTORS,
    VOLUME_UNITS,
    WEIGHT_UNITS,
    IngredientFactors,
    find_ingredient,
)
from ..schemas.impact_schemas import (
    IngredientImpact,
    IngredientInput,
    ImpactTotals,
)

logger = logging.getLogger(__name__)

DEFAULT_QUANTITY = 1.0
DEFAULT_UNIT = "piece"


class ImpactCalculator:
    """
    Service for calculating environmental and financial impact of ingredients.

    Uses a reference table of per-piece weights, cost per kg and carbon
    intensity. The table and the lookup-miss estimate can be swapped out.
    """

    def __init__(
        self,
        table: Optional[Dict[str, IngredientFactors]] = None,
        default_estimate: Optional[Dict[str, float]] = None,
    ):
        self.table = table if table is not None else INGREDIENT_FACTORS
        self.default_estimate = default_estimate or DEFAULT_ESTIMATE

    def estimate(self, name: str, quantity: float, unit: str) -> IngredientImpact:
        """
        Estimate the impact of `quantity` `unit` of `name`.

        A name missing from the table is not an error: the default estimate
        is scaled by quantity and found_in_lookup is False.
        """
        if not math.isfinite(quantity) or quantity <= 0:
            raise ImpactValidationError(f"quantity for {name!r} must be a positive finite number")

        factors = find_ingredient(name, self.table)
        if factors is None:
            logger.warning("No impact factors for ingredient %r, using default estimate", name)
            return _checked(IngredientImpact(
                name=name,
                quantity=quantity,
                unit=unit,
                weight_kg=round(self.default_estimate["weight_kg"] * quantity, 4),
                cost_usd=round(self.default_estimate["cost_usd"] * quantity, 4),
                co2_kg=round(self.default_estimate["co2_kg"] * quantity, 4),
                found_in_lookup=False,
            ))

        weight_kg = round(self._to_kg(quantity, unit, factors["unit_weight_kg"]), 4)
        return _checked(IngredientImpact(
            name=name,
            quantity=quantity,
            unit=unit,
            weight_kg=weight_kg,
            cost_usd=round(weight_kg * factors["cost_per_kg"], 4),
            co2_kg=round(weight_kg * factors["co2_per_kg"], 4),
            found_in_lookup=True,
        ))

    def _to_kg(self, quantity: float, unit: str, unit_weight_kg: float) -> float:
        """
        Convert a quantity to kilograms.

        Weight, volume and container units convert directly; count units
        (and anything unrecognised) scale the ingredient's per-piece weight.
        """
        normalized_unit = unit.lower().strip()

        if normalized_unit in WEIGHT_UNITS:
            return quantity * WEIGHT_UNITS[normalized_unit]
        if normalized_unit in VOLUME_UNITS:
            return quantity * VOLUME_UNITS[normalized_unit]
        if normalized_unit in CONTAINER_UNITS:
            return quantity * CONTAINER_UNITS[normalized_unit]
        return quantity * unit_weight_kg * COUNT_UNITS.get(normalized_unit, 1.0)

    def calculate_single_ingredient(self, ingredient: IngredientInput) -> IngredientImpact:
        """Apply the quantity/unit defaults, then estimate."""
        quantity = ingredient.quantity if ingredient.quantity is not None else DEFAULT_QUANTITY
        unit = ingredient.unit or DEFAULT_UNIT
        return self.estimate(ingredient.name, quantity, unit)

    def calculate_total_impact(
        self,
        ingredients: List[IngredientInput]
    ) -> Tuple[ImpactTotals, List[IngredientImpact]]:
        """
        Calculate total impact for a list of ingredients.

        Returns:
            Tuple of (ImpactTotals, per-ingredient breakdown)
        """
        if not ingredients:
            raise ImpactValidationError("At least one ingredient is required")

        breakdown = [self.calculate_single_ingredient(i) for i in ingredients]
        totals = sum_breakdown(breakdown)
        if not all(math.isfinite(v) for v in totals.model_dump().values()):
            raise ImpactValidationError("Ingredient quantities are too large to total")
        return totals, breakdown


def sum_breakdown(breakdown: List[IngredientImpact]) -> ImpactTotals:
    return ImpactTotals(
        waste_prevented_kg=round(sum(b.weight_kg for b in breakdown), 4),
        money_saved_usd=round(sum(b.cost_usd for b in breakdown), 4),
        co2_avoided_kg=round(sum(b.co2_kg for b in breakdown), 4),
    )


def _checked(impact: IngredientImpact) -> IngredientImpact:
    # Huge finite quantities can still overflow to inf once converted.
    if not all(math.isfinite(v) for v in (impact.weight_kg, impact.cost_usd, impact.co2_kg)):
        raise ImpactValidationError(f"quantity for {impact.name!r} is too large")
    return impact
