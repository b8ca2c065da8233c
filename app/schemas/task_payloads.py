from __future__ import annotations
# app/schemas/task_payloads.py
from pydantic import BaseModel, Field
from typing import Optional, Literal


class BookingEmailPayload(BaseModel):
    """Payload for booking confirmation / cancellation emails"""
    event_type: Literal["BookingConfirmed", "BookingCancelled"] = Field(..., description="Lifecycle event")
    booking_id: str = Field(..., description="Booking identifier")
    email: str = Field(..., description="Recipient email address")
    first_name: Optional[str] = Field(None, description="Recipient first name")
    restaurant_name: str = Field(..., description="Restaurant name")
    date: str = Field(..., description="Booking day, ISO format")
    time: str = Field(..., description="Booking time, HH:MM")
    party_size: int = Field(..., description="Number of guests")


class NotificationRecordPayload(BaseModel):
    """Payload for creating an in-app notification record"""
    user_id: str = Field(..., description="Recipient user ID")
    message: str = Field(..., description="Notification text")
    type: Literal["booking_confirmed", "booking_cancelled"] = Field(..., description="Notification type")
    booking_id: Optional[str] = Field(None, description="Related booking ID")
