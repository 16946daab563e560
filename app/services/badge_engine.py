"""
Badge Engine

Evaluates lifetime metrics against bronze/silver/gold thresholds for each
badge type. Earned tiers are recorded once and never revoked.
"""

import logging
from datetime import datetime
from typing import Dict, List, Mapping, Optional

from ..data.ingredient_defaults import BADGE_THRESHOLDS
from ..schemas.impact_schemas import (
    TIER_ORDER,
    BadgeInfo,
    BadgeTier,
    BadgeType,
)

logger = logging.getLogger(__name__)

EarnedBadges = Dict[str, Dict[str, datetime]]


# Display name and a description template per badge type. {value} is the
# tier threshold.
BADGE_METADATA = {
    BadgeType.WASTE_SAVER: ("Food Saver", "Prevented {value:g}kg of food waste"),
    BadgeType.MONEY_SAVER: ("Penny Pincher", "Saved ${value:g} on groceries"),
    BadgeType.CARBON_HERO: ("Climate Guardian", "Avoided {value:g}kg of CO₂ emissions"),
    BadgeType.STREAK_MASTER: ("Streak Master", "Maintained a {value:g}-day streak"),
    BadgeType.RECIPE_CHEF: ("Home Chef", "Made {value:g} recipes"),
    BadgeType.COMMUNITY_HERO: ("Community Hero", "Shared {value:g} food items"),
}

GOLD_FLOURISH = {
    BadgeType.WASTE_SAVER: "Food Waste Champion!",
    BadgeType.MONEY_SAVER: "Budget Master!",
    BadgeType.CARBON_HERO: "Planet Protector!",
    BadgeType.STREAK_MASTER: "Unstoppable!",
    BadgeType.RECIPE_CHEF: "Master Chef!",
    BadgeType.COMMUNITY_HERO: "Neighborhood Hero!",
}


class BadgeEngine:
    """
    Badge evaluation against a threshold table.

    thresholds maps badge type value -> {"bronze": x, "silver": y, "gold": z}
    with x < y < z. Badge types without thresholds are never awarded.
    """

    def __init__(self, thresholds: Optional[Mapping[str, Mapping[str, float]]] = None):
        self.thresholds = {k: dict(v) for k, v in (thresholds or BADGE_THRESHOLDS).items()}
        for badge_type, tiers in self.thresholds.items():
            values = [tiers[t.value] for t in TIER_ORDER]
            if not all(a < b for a, b in zip(values, values[1:])):
                raise ValueError(f"Badge thresholds for {badge_type} must be strictly ascending")

    def threshold(self, badge_type: BadgeType, tier: BadgeTier) -> Optional[float]:
        tiers = self.thresholds.get(badge_type.value)
        return tiers[tier.value] if tiers else None

    def describe(self, badge_type: BadgeType, tier: BadgeTier) -> str:
        _, template = BADGE_METADATA[badge_type]
        description = template.format(value=self.threshold(badge_type, tier))
        if tier == BadgeTier.GOLD:
            description = f"{description} - {GOLD_FLOURISH[badge_type]}"
        return description

    def _badge(self, badge_type: BadgeType, tier: BadgeTier, **kwargs) -> BadgeInfo:
        return BadgeInfo(
            type=badge_type,
            tier=tier,
            name=BADGE_METADATA[badge_type][0],
            description=self.describe(badge_type, tier),
            **kwargs,
        )

    def highest_met_tier(self, badge_type: BadgeType, value: float) -> Optional[BadgeTier]:
        met = None
        for tier in TIER_ORDER:
            threshold = self.threshold(badge_type, tier)
            if threshold is None or value < threshold:
                break
            met = tier
        return met

    def evaluate(
        self,
        earned: EarnedBadges,
        metrics: Mapping[BadgeType, float],
        now: datetime,
    ) -> List[BadgeInfo]:
        """
        Record and return newly earned badges.

        For each badge type only the highest newly crossed tier is returned.
        Lower tiers crossed in the same evaluation are recorded alongside it
        so later evaluations never emit them.
        """
        new_badges = []
        for badge_type in BadgeType:
            value = metrics.get(badge_type, 0)
            top = self.highest_met_tier(badge_type, value)
            if top is None:
                continue

            recorded = earned.setdefault(badge_type.value, {})
            if top.value in recorded:
                continue

            for tier in TIER_ORDER[:TIER_ORDER.index(top) + 1]:
                recorded.setdefault(tier.value, now)
            logger.info("Badge earned: %s %s", badge_type.value, top.value)
            new_badges.append(self._badge(badge_type, top, earned_at=now))

        return new_badges

    def progress_toward(self, badge_type: BadgeType, tier: BadgeTier, value: float) -> float:
        threshold = self.threshold(badge_type, tier)
        progress = round(100 * max(value, 0) / threshold, 1)
        return min(progress, 99.9)

    def earned_badges(
        self,
        earned: EarnedBadges,
        metrics: Mapping[BadgeType, float],
    ) -> List[BadgeInfo]:
        """Each earned badge type at its highest tier, with progress to the next tier."""
        badges = []
        for badge_type in BadgeType:
            if badge_type.value not in self.thresholds:
                continue
            recorded = earned.get(badge_type.value, {})
            tiers = [t for t in TIER_ORDER if t.value in recorded]
            if not tiers:
                continue
            tier = tiers[-1]
            next_tier = _next_tier(tier)

            progress = None
            next_threshold = None
            if next_tier is not None:
                next_threshold = self.threshold(badge_type, next_tier)
                progress = self.progress_toward(badge_type, next_tier, metrics.get(badge_type, 0))

            badges.append(self._badge(
                badge_type,
                tier,
                earned_at=recorded[tier.value],
                progress=progress,
                next_tier_threshold=next_threshold,
            ))
        return badges

    def next_badge(
        self,
        earned: EarnedBadges,
        metrics: Mapping[BadgeType, float],
    ) -> Optional[BadgeInfo]:
        """The unearned tier with the highest nonzero progress across all badge types."""
        best = None
        for badge_type in BadgeType:
            if badge_type.value not in self.thresholds:
                continue
            recorded = earned.get(badge_type.value, {})
            pending = [t for t in TIER_ORDER if t.value not in recorded]
            if not pending:
                continue
            tier = pending[0]
            progress = self.progress_toward(badge_type, tier, metrics.get(badge_type, 0))
            if progress > 0 and (best is None or progress > best.progress):
                best = self._badge(
                    badge_type,
                    tier,
                    progress=progress,
                    next_tier_threshold=self.threshold(badge_type, tier),
                )
        return best


def _next_tier(tier: BadgeTier) -> Optional[BadgeTier]:
    index = TIER_ORDER.index(tier)
    return TIER_ORDER[index + 1] if index + 1 < len(TIER_ORDER) else None
