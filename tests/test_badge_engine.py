from datetime import datetime, timezone

import pytest

from app.schemas.impact_schemas import BadgeTier, BadgeType
from app.services.badge_engine import BadgeEngine

NOW = datetime(2026, 2, 18, 12, 0, tzinfo=timezone.utc)
LATER = datetime(2026, 2, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    return BadgeEngine()


def test_nothing_earned_below_bronze(engine):
    earned = {}
    assert engine.evaluate(earned, {BadgeType.WASTE_SAVER: 4.9}, NOW) == []
    assert earned == {}


def test_bronze_earned_once(engine):
    earned = {}
    new = engine.evaluate(earned, {BadgeType.WASTE_SAVER: 5.0}, NOW)
    assert [(b.type, b.tier) for b in new] == [(BadgeType.WASTE_SAVER, BadgeTier.BRONZE)]
    assert new[0].earned_at == NOW
    assert new[0].name == "Food Saver"

    assert engine.evaluate(earned, {BadgeType.WASTE_SAVER: 6.0}, LATER) == []
    assert earned["waste_saver"]["bronze"] == NOW


def test_only_highest_newly_crossed_tier_emitted(engine):
    earned = {}
    new = engine.evaluate(earned, {BadgeType.MONEY_SAVER: 300.0}, NOW)
    assert [(b.type, b.tier) for b in new] == [(BadgeType.MONEY_SAVER, BadgeTier.SILVER)]
    assert set(earned["money_saver"]) == {"bronze", "silver"}

    new = engine.evaluate(earned, {BadgeType.MONEY_SAVER: 1000.0}, LATER)
    assert [b.tier for b in new] == [BadgeTier.GOLD]
    assert earned["money_saver"]["bronze"] == NOW


def test_earned_tier_never_revoked_when_metric_drops(engine):
    earned = {}
    engine.evaluate(earned, {BadgeType.STREAK_MASTER: 7}, NOW)
    assert engine.evaluate(earned, {BadgeType.STREAK_MASTER: 1}, LATER) == []
    assert "bronze" in earned["streak_master"]


def test_badge_types_are_independent(engine):
    earned = {}
    new = engine.evaluate(
        earned,
        {BadgeType.RECIPE_CHEF: 5, BadgeType.COMMUNITY_HERO: 2, BadgeType.CARBON_HERO: 10},
        NOW,
    )
    assert {b.type for b in new} == {BadgeType.RECIPE_CHEF, BadgeType.CARBON_HERO}
    next_badge = engine.next_badge(earned, {BadgeType.COMMUNITY_HERO: 2})
    assert next_badge.type == BadgeType.COMMUNITY_HERO
    assert next_badge.progress == pytest.approx(66.7)


def test_progress_toward_bronze_is_clamped_below_100(engine):
    assert engine.progress_toward(BadgeType.WASTE_SAVER, BadgeTier.BRONZE, 2.5) == pytest.approx(50.0)
    assert engine.progress_toward(BadgeType.WASTE_SAVER, BadgeTier.BRONZE, 50) < 100
    assert engine.progress_toward(BadgeType.WASTE_SAVER, BadgeTier.BRONZE, -1) == 0


def test_earned_badges_report_progress_to_next_tier(engine):
    earned = {}
    engine.evaluate(earned, {BadgeType.WASTE_SAVER: 5.0}, NOW)
    badges = engine.earned_badges(earned, {BadgeType.WASTE_SAVER: 10.0})
    assert len(badges) == 1
    assert badges[0].tier == BadgeTier.BRONZE
    assert badges[0].next_tier_threshold == 25.0
    assert badges[0].progress == pytest.approx(40.0)


def test_gold_badge_has_no_next_tier(engine):
    earned = {}
    engine.evaluate(earned, {BadgeType.RECIPE_CHEF: 100}, NOW)
    [badge] = engine.earned_badges(earned, {BadgeType.RECIPE_CHEF: 100})
    assert badge.tier == BadgeTier.GOLD
    assert badge.progress is None
    assert badge.next_tier_threshold is None
    assert badge.description.endswith("Master Chef!")


def test_next_badge_none_without_progress(engine):
    assert engine.next_badge({}, {}) is None


def test_thresholds_are_configurable():
    engine = BadgeEngine({"waste_saver": {"bronze": 1, "silver": 2, "gold": 3}})
    new = engine.evaluate({}, {BadgeType.WASTE_SAVER: 2, BadgeType.RECIPE_CHEF: 500}, NOW)
    assert [(b.type, b.tier) for b in new] == [(BadgeType.WASTE_SAVER, BadgeTier.SILVER)]
    assert new[0].description == "Prevented 2kg of food waste"


def test_thresholds_must_ascend():
    with pytest.raises(ValueError):
        BadgeEngine({"waste_saver": {"bronze": 5, "silver": 5, "gold": 10}})
