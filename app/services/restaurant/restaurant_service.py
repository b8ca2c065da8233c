# ============================================================================
# app/services/restaurant/restaurant_service.py
# Restaurant registration and manager-side listing edits
# ============================================================================
"""
Managers register restaurants here. A new restaurant starts pending and
unapproved with no inventory; it shows up in search only once an operator
approves it, and becomes bookable once a day of tables is seeded.
"""
from typing import Any, Dict, List, Optional, Union
from uuid import UUID
import logging

from sqlalchemy.orm import Session, joinedload

from app.config.database import persistence_guard
from app.core.exceptions import InvalidRequestError
from app.models.restaurant import Restaurant
from app.models.user import User
from app.services.booking.booking_query_service import BookingQueryService
from app.services.search.search_service import SearchService
from app.utils.time_utils import canonical_hhmm

logger = logging.getLogger(__name__)

# Columns a manager may set directly; address and hours arrive nested
PLAIN_FIELDS = ("name", "description", "cuisine_type", "cost_rating", "phone", "email")
ADDRESS_FIELDS = ("street", "city", "state", "zip_code")
HOURS_FIELDS = {"opening": "opening_time", "closing": "closing_time"}


class RestaurantService:
    """Service layer for restaurant registration and edits."""

    @staticmethod
    def create_restaurant(db: Session, manager: User, data: Dict[str, Any]) -> Restaurant:
        """Register a restaurant for a manager: pending, unapproved, no inventory."""
        fields = RestaurantService._columns(data)
        if not fields.get("name") or not fields.get("cuisine_type"):
            raise InvalidRequestError("Restaurant name and cuisine type are required")

        restaurant = Restaurant(
            manager_id=manager.id,
            is_approved=False,
            is_pending=True,
            photos=[],
            **fields
        )

        with persistence_guard(db):
            db.add(restaurant)
            db.commit()
            db.refresh(restaurant)

        logger.info(f"Restaurant {restaurant.id} ({restaurant.name}) registered by manager {manager.id}")
        return restaurant

    @staticmethod
    def update_restaurant(
            db: Session,
            restaurant_id: Union[str, UUID],
            requesting_user: User,
            data: Dict[str, Any]
    ) -> Restaurant:
        """Edit listing details. Moderation flags and inventory are not touched here."""
        restaurant = BookingQueryService.get_managed_restaurant(db, restaurant_id, requesting_user)

        fields = RestaurantService._columns(data)
        for required in ("name", "cuisine_type"):
            if required in fields and not fields[required]:
                raise InvalidRequestError(f"{required} cannot be empty")

        for column, value in fields.items():
            setattr(restaurant, column, value)

        with persistence_guard(db):
            db.commit()
            db.refresh(restaurant)

        logger.info(f"Restaurant {restaurant.id} updated: {', '.join(sorted(fields)) or 'no changes'}")
        return restaurant

    @staticmethod
    def list_managed_restaurants(db: Session, manager: User) -> List[Dict[str, Any]]:
        """Every restaurant of a manager, approved or not, with rating aggregates."""
        with persistence_guard(db):
            restaurants = db.query(Restaurant).options(
                joinedload(Restaurant.manager)
            ).filter(
                Restaurant.manager_id == manager.id
            ).order_by(Restaurant.name, Restaurant.id).all()

            return SearchService.summaries(db, restaurants)

    @staticmethod
    def summary(db: Session, restaurant: Restaurant) -> Dict[str, Any]:
        with persistence_guard(db):
            return SearchService.summaries(db, [restaurant])[0]

    @staticmethod
    def _columns(data: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten the nested address / hours payload onto model columns"""
        columns = {name: data[name] for name in PLAIN_FIELDS if name in data}

        for name in ("name", "cuisine_type"):
            if isinstance(columns.get(name), str):
                columns[name] = columns[name].strip()

        address: Optional[Dict[str, Any]] = data.get("address")
        if address:
            columns.update({name: address[name] for name in ADDRESS_FIELDS if name in address})

        hours: Optional[Dict[str, Any]] = data.get("hours")
        if hours:
            for key, column in HOURS_FIELDS.items():
                if key in hours:
                    columns[column] = canonical_hhmm(hours[key]) if hours[key] else None

        return columns
