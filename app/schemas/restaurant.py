"""
Pydantic schemas for restaurant listings, inventory seeding and faults
"""
from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID


# ============================================================================
# Response Schemas
# ============================================================================

class ManagerSummary(BaseModel):
    id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class AddressSchema(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, validation_alias=AliasChoices("zip_code", "zipCode"))


class HoursSchema(BaseModel):
    opening: Optional[str] = None
    closing: Optional[str] = None


class RestaurantSummary(BaseModel):
    """Search result entry: listing plus rating aggregate and manager"""
    id: UUID
    name: str
    description: Optional[str] = None
    cuisine_type: Optional[str] = None
    cost_rating: Optional[int] = None
    address: AddressSchema
    phone: Optional[str] = None
    email: Optional[str] = None
    hours: HoursSchema
    photos: List[str] = Field(default_factory=list)
    is_approved: bool
    is_pending: bool
    times_booked_today: int = 0
    average_rating: float = 0
    review_count: int = 0
    manager: Optional[ManagerSummary] = None


class TableDefinitionOut(BaseModel):
    id: UUID
    table_size: int
    available_times: List[str]


class DateAvailabilityOut(BaseModel):
    date: str
    tables: List[TableDefinitionOut]


class RestaurantDetail(RestaurantSummary):
    bookings_made_today: int = 0
    availability: List[DateAvailabilityOut] = Field(default_factory=list)


class SearchResponse(BaseModel):
    restaurants: List[RestaurantSummary]
    total: int


# ============================================================================
# Registration and edits
# ============================================================================

class RestaurantCreateRequest(BaseModel):
    """New listing from a manager. Photos are not accepted here."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    cuisine_type: str = Field(
        ..., min_length=1, max_length=100, validation_alias=AliasChoices("cuisine_type", "cuisineType")
    )
    cost_rating: Optional[int] = Field(
        None, ge=1, le=4, validation_alias=AliasChoices("cost_rating", "costRating")
    )
    address: AddressSchema = Field(default_factory=AddressSchema)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    hours: HoursSchema = Field(default_factory=HoursSchema)


class RestaurantUpdateRequest(BaseModel):
    """Partial edit: only the fields sent are changed"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    cuisine_type: Optional[str] = Field(
        None, min_length=1, max_length=100, validation_alias=AliasChoices("cuisine_type", "cuisineType")
    )
    cost_rating: Optional[int] = Field(
        None, ge=1, le=4, validation_alias=AliasChoices("cost_rating", "costRating")
    )
    address: Optional[AddressSchema] = None
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    hours: Optional[HoursSchema] = None

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True, exclude={"address", "hours"})
        if self.address is not None:
            data["address"] = self.address.model_dump(exclude_unset=True)
        if self.hours is not None:
            data["hours"] = self.hours.model_dump(exclude_unset=True)
        return data


# ============================================================================
# Inventory seeding
# ============================================================================

class TableDefinitionIn(BaseModel):
    """
    One table class for a day. Send the id of an existing definition to
    update it in place; omit it to create a new one.
    """
    id: Optional[UUID] = None
    table_size: int = Field(..., ge=1, validation_alias=AliasChoices("table_size", "tableSize"))
    available_times: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("available_times", "availableTimes")
    )


class DateAvailabilityRequest(BaseModel):
    tables: List[TableDefinitionIn]

    @field_validator("tables")
    @classmethod
    def validate_tables(cls, v):
        if not v:
            raise ValueError("At least one table definition is required")
        return v

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [table.model_dump() for table in self.tables]


# ============================================================================
# Consistency faults
# ============================================================================

class ConsistencyFaultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    kind: str
    booking_id: Optional[UUID] = None
    restaurant_id: Optional[UUID] = None
    detail: Optional[str] = None
    created_at: Optional[datetime] = None
