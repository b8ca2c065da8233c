"""
Pydantic schemas for booking requests and responses
"""
from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_serializer
from typing import Optional, Any
from datetime import date as date_type, datetime
from uuid import UUID

from app.utils.time_utils import utc_midnight


# ============================================================================
# Request Schemas
# ============================================================================

class BookingCreateRequest(BaseModel):
    """
    Schema for creating a booking.

    Every field is optional here so that missing or malformed values reach
    the booking service, which reports them with its own error codes.
    Accepts both snake_case and camelCase keys.
    """
    restaurant_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("restaurant_id", "restaurantId")
    )
    date: Optional[str] = Field(None, description="Booking day, ISO date or datetime")
    time: Optional[str] = Field(None, description="HH:MM (24h)")
    party_size: Optional[Any] = Field(
        None, validation_alias=AliasChoices("party_size", "partySize")
    )


# ============================================================================
# Response Schemas
# ============================================================================

class BookingUserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class BookingRestaurantSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    city: Optional[str] = None
    phone: Optional[str] = None


class BookingResponse(BaseModel):
    """A booking with its diner and restaurant resolved"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    restaurant_id: UUID
    date: date_type
    time: str
    party_size: int
    table_size: int
    booked_table_definition_id: Optional[UUID] = None
    status: str
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    user: Optional[BookingUserSummary] = None
    restaurant: Optional[BookingRestaurantSummary] = None

    @field_serializer("date")
    def serialize_date(self, value: date_type) -> str:
        # Days travel as midnight UTC
        return utc_midnight(value).isoformat().replace("+00:00", "Z")
