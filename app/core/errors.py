"""
Exception taxonomy for the impact-tracking domain.

Service code raises these; the HTTP layer maps them to status codes.
"""


class ImpactError(Exception):
    """Base class for impact domain errors."""


class ImpactValidationError(ImpactError, ValueError):
    """Input rejected before anything is persisted."""


class EventNotFoundError(ImpactError):
    """No event with this id belongs to the user."""

    def __init__(self, event_id: str):
        super().__init__(f"Impact event {event_id} not found")
        self.event_id = event_id


class InvalidStatusTransition(ImpactError):
    """Events only move from active to reversed or deleted."""

    def __init__(self, event_id: str, current: str, requested: str):
        super().__init__(
            f"Impact event {event_id} is {current}; cannot change to {requested}"
        )
        self.event_id = event_id
        self.current = current
        self.requested = requested
