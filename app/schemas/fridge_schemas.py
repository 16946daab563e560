"""
FridgeShare (leftover sharing) models used by the API client.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ListingStatus(str, Enum):
    AVAILABLE = "available"
    CLAIMED = "claimed"
    DELETED = "deleted"


class FridgeListingCreate(BaseModel):
    """Payload for posting leftovers to the community feed."""
    user_id: str = Field(..., min_length=1)
    user_display_name: str
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    items: List[str]                    # e.g. ["3 tomatoes", "1 carton milk"]
    quantity: Optional[str] = None      # e.g. "enough for 2 meals"
    expiry_hint: Optional[str] = None
    pickup_instructions: Optional[str] = None
    image_url: Optional[str] = None


class FridgeListing(FridgeListingCreate):
    id: str
    status: ListingStatus = ListingStatus.AVAILABLE
    claimed_by: Optional[str] = None
    claimed_by_name: Optional[str] = None
    created_at: datetime


class ClaimRequest(BaseModel):
    claimed_by: str
    claimed_by_name: str
