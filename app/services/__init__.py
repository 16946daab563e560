"""
Services module for impact tracking system.
Contains business logic for impact calculation, streaks, badges, weekly goals,
and the service that ties them to the event log.
"""

from .impact_calculator import ImpactCalculator
from .badge_engine import BadgeEngine
from .impact_service import ImpactService

__all__ = [
    "ImpactCalculator",
    "BadgeEngine",
    "ImpactService"
]
