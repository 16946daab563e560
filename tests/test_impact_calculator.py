import pytest

from app.core.errors import ImpactValidationError
from app.data.ingredient_defaults import DEFAULT_ESTIMATE, find_ingredient
from app.schemas.impact_schemas import IngredientInput
from app.services.impact_calculator import ImpactCalculator

TOMATO_TABLE = {
    "tomato": {
        "unit_weight_kg": 0.15,
        "cost_per_kg": 0.50,
        "co2_per_kg": 0.2,
        "category": "produce",
        "aliases": ["roma tomato"],
    },
    "rice": {
        "unit_weight_kg": 0.18,
        "cost_per_kg": 3.0,
        "co2_per_kg": 4.0,
        "category": "grains",
        "aliases": [],
    },
}


@pytest.fixture
def calculator():
    return ImpactCalculator(table=TOMATO_TABLE)


def test_three_tomatoes(calculator):
    impact = calculator.estimate("tomato", 3, "piece")
    assert impact.weight_kg == pytest.approx(0.45)
    assert impact.cost_usd == pytest.approx(0.225)
    assert impact.co2_kg == pytest.approx(0.09)
    assert impact.found_in_lookup is True


def test_lookup_is_case_insensitive_and_trimmed(calculator):
    impact = calculator.estimate("  TOMATO ", 1, "piece")
    assert impact.found_in_lookup is True
    assert impact.weight_kg == pytest.approx(0.15)


def test_lookup_uses_aliases_and_plurals(calculator):
    assert calculator.estimate("Roma Tomato", 1, "piece").found_in_lookup
    assert calculator.estimate("tomatoes", 2, "pieces").weight_kg == pytest.approx(0.3)


def test_weight_units_ignore_piece_weight(calculator):
    impact = calculator.estimate("tomato", 500, "g")
    assert impact.weight_kg == pytest.approx(0.5)
    assert impact.cost_usd == pytest.approx(0.25)


def test_volume_units(calculator):
    assert calculator.estimate("rice", 1, "cup").weight_kg == pytest.approx(0.24)


def test_count_multiplier_units(calculator):
    assert calculator.estimate("tomato", 1, "dozen").weight_kg == pytest.approx(1.8)


def test_lookup_miss_degrades_to_default(calculator):
    impact = calculator.estimate("dragonfruit", 2, "piece")
    assert impact.found_in_lookup is False
    assert impact.weight_kg == pytest.approx(DEFAULT_ESTIMATE["weight_kg"] * 2)
    assert impact.cost_usd > 0
    assert impact.co2_kg > 0


def test_non_positive_quantity_rejected(calculator):
    with pytest.raises(ImpactValidationError):
        calculator.estimate("tomato", 0, "piece")


@pytest.mark.parametrize("quantity", [float("inf"), float("nan")])
def test_non_finite_quantity_rejected(calculator, quantity):
    with pytest.raises(ImpactValidationError):
        calculator.estimate("tomato", quantity, "piece")


def test_quantity_that_overflows_after_conversion_rejected(calculator):
    # 1e308 * 12 * 0.15 kg is past the float range
    with pytest.raises(ImpactValidationError):
        calculator.estimate("tomato", 1e308, "dozen")


def test_totals_that_overflow_rejected(calculator):
    ingredients = [IngredientInput(name="tomato", quantity=1e308, unit="kg")] * 2
    with pytest.raises(ImpactValidationError):
        calculator.calculate_total_impact(ingredients)


def test_defaults_applied_for_missing_quantity_and_unit(calculator):
    impact = calculator.calculate_single_ingredient(IngredientInput(name="tomato"))
    assert impact.quantity == 1
    assert impact.unit == "piece"
    assert impact.weight_kg == pytest.approx(0.15)


def test_totals_equal_sum_of_breakdown(calculator):
    ingredients = [
        IngredientInput(name="tomato", quantity=3),
        IngredientInput(name="rice", quantity=2, unit="cups"),
        IngredientInput(name="mystery meat", quantity=1),
    ]
    totals, breakdown = calculator.calculate_total_impact(ingredients)
    assert len(breakdown) == 3
    assert totals.waste_prevented_kg == pytest.approx(sum(b.weight_kg for b in breakdown))
    assert totals.money_saved_usd == pytest.approx(sum(b.cost_usd for b in breakdown))
    assert totals.co2_avoided_kg == pytest.approx(sum(b.co2_kg for b in breakdown))


def test_empty_ingredient_list_rejected(calculator):
    with pytest.raises(ImpactValidationError):
        calculator.calculate_total_impact([])


def test_default_table_knows_common_ingredients():
    assert find_ingredient("Chicken Breasts") is not None
    assert find_ingredient("aubergine") is not None
    assert find_ingredient("unobtainium") is None
