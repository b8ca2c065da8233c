# ============================================================================
# FILE: app/api/v1/bookings.py
# Diner booking endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session
from typing import List

from app.config.database import get_db
from app.models.user import User
from app.api.dependencies import get_current_active_user
from app.schemas.booking import BookingCreateRequest, BookingResponse
from app.services.booking.booking_query_service import BookingQueryService
from app.services.booking.booking_service import BookingService
from app.services.notification.dispatcher import NotificationDispatcher, get_notification_dispatcher

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
        request: BookingCreateRequest,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    """
    Book a table at the exact requested time.
    Returns 409 with retryable=true when the slot was taken concurrently.
    """
    service = BookingService(db, dispatcher)
    return service.create_booking(
        user=current_user,
        restaurant_id=request.restaurant_id,
        date=request.date,
        time=request.time,
        party_size=request.party_size
    )


@router.get("/me", response_model=List[BookingResponse])
def list_my_bookings(
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Your bookings, most recent date first."""
    return BookingQueryService.list_user_bookings(db=db, user_id=current_user.id)


@router.patch("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
        booking_id: str = Path(..., description="The booking ID"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db),
        dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    """
    Cancel one of your bookings (admins may cancel any booking).
    The time slot is returned to the restaurant's inventory.
    """
    service = BookingService(db, dispatcher)
    return service.cancel_booking(booking_id=booking_id, requesting_user=current_user)
