# ============================================================================
# app/services/booking/booking_query_service.py
# Read-side booking listings - no FastAPI dependencies
# ============================================================================
from typing import List, Union
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from app.config.database import persistence_guard
from app.core.exceptions import NotAuthorizedError, RestaurantNotFoundError
from app.models.booking import Booking
from app.models.restaurant import Restaurant
from app.models.user import User


class BookingQueryService:
    """Service layer for booking listings."""

    @staticmethod
    def list_user_bookings(db: Session, user_id: UUID) -> List[Booking]:
        """All bookings of a user, most recent date first."""
        with persistence_guard(db):
            return db.query(Booking).options(
                joinedload(Booking.restaurant)
            ).filter(
                Booking.user_id == user_id
            ).order_by(Booking.date.desc(), Booking.time.desc()).all()

    @staticmethod
    def list_restaurant_bookings(
            db: Session,
            restaurant_id: Union[str, UUID],
            requesting_user: User
    ) -> List[Booking]:
        """Bookings of a restaurant, for its manager or an admin."""
        restaurant = BookingQueryService.get_managed_restaurant(db, restaurant_id, requesting_user)

        with persistence_guard(db):
            return db.query(Booking).options(
                joinedload(Booking.user)
            ).filter(
                Booking.restaurant_id == restaurant.id
            ).order_by(Booking.date.desc(), Booking.time.desc()).all()

    @staticmethod
    def get_managed_restaurant(
            db: Session,
            restaurant_id: Union[str, UUID],
            requesting_user: User
    ) -> Restaurant:
        """Restaurant the user manages (admins manage all), or raise."""
        try:
            restaurant_uuid = restaurant_id if isinstance(restaurant_id, UUID) else UUID(str(restaurant_id))
        except ValueError:
            raise RestaurantNotFoundError()

        with persistence_guard(db):
            restaurant = db.get(Restaurant, restaurant_uuid)
        if restaurant is None:
            raise RestaurantNotFoundError()

        if not requesting_user.is_admin() and restaurant.manager_id != requesting_user.id:
            raise NotAuthorizedError("Not the manager of this restaurant")

        return restaurant
