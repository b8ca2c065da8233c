# ============================================================================
# app/services/search/search_service.py
# Read-only restaurant search across many inventories
# ============================================================================
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Union
from uuid import UUID
import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from app.config.database import persistence_guard
from app.config.settings import settings
from app.core.exceptions import RestaurantNotFoundError
from app.models.booking import Booking
from app.models.restaurant import DateAvailability, Restaurant
from app.models.review import Review
from app.services.availability.availability_matcher import table_fits, time_window
from app.utils.time_utils import canonical_hhmm, normalize_utc_day, tolerance_window

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SearchService:
    """Service layer for restaurant search and listing."""

    @staticmethod
    def search(
            db: Session,
            location: Optional[str] = None,
            date: Optional[str] = None,
            time: Optional[str] = None,
            party_size: Optional[Union[str, int]] = None
    ) -> List[Dict[str, Any]]:
        """
        Approved restaurants, optionally filtered by location and by having an
        open table within the tolerance window of the requested time.

        Raises InvalidTimeFormatError / InvalidDateError when date and time are
        given but malformed. A malformed party size only drops the size filter.
        """
        with persistence_guard(db):
            query = db.query(Restaurant).options(joinedload(Restaurant.manager)).filter(
                Restaurant.is_approved.is_(True)
            ).order_by(Restaurant.name, Restaurant.id)

            if location and location.strip():
                term = location.strip()
                query = query.filter(or_(
                    Restaurant.city.ilike(f"%{_escape_like(term)}%", escape="\\"),
                    Restaurant.zip_code == term,
                ))

            if date and time:
                time_str = canonical_hhmm(time)
                day = normalize_utc_day(date)
                size_filter = SearchService._optional_party_size(party_size)
                start_str, end_str = tolerance_window(time_str, settings.SEARCH_TOLERANCE_MINUTES)

                logger.info(
                    f"Search window {start_str}-{end_str} on {day.isoformat()} "
                    f"for party size {size_filter if size_filter is not None else 'any'}"
                )

                candidates = query.all()
                qualifying = SearchService._restaurants_with_open_tables(
                    db, [r.id for r in candidates], day, size_filter, start_str, end_str
                )
                restaurants = [r for r in candidates if r.id in qualifying]
            else:
                restaurants = query.all()

            return SearchService.summaries(db, restaurants)

    @staticmethod
    def _optional_party_size(value: Optional[Union[str, int]]) -> Optional[int]:
        if value is None or value == "":
            return None
        try:
            numeric = int(value)
        except (TypeError, ValueError):
            logger.info(f"Invalid partySize {value!r} received, ignoring for table size filter")
            return None
        if numeric <= 0:
            logger.info(f"Invalid partySize {value!r} received, ignoring for table size filter")
            return None
        return numeric

    @staticmethod
    def _restaurants_with_open_tables(
            db: Session,
            restaurant_ids: List[UUID],
            day,
            party_size: Optional[int],
            start_str: str,
            end_str: str
    ) -> set:
        if not restaurant_ids:
            return set()

        entries = db.query(DateAvailability).options(selectinload(DateAvailability.tables)).filter(
            DateAvailability.restaurant_id.in_(restaurant_ids),
            DateAvailability.date == day
        ).all()

        predicate = time_window(start_str, end_str)
        return {
            entry.restaurant_id
            for entry in entries
            if any(table_fits(table, party_size, predicate) for table in entry.tables)
        }

    # ------------------------------------------------------------------
    # Detail
    # ------------------------------------------------------------------

    @staticmethod
    def get_restaurant_detail(db: Session, restaurant_id: Union[str, UUID]) -> Dict[str, Any]:
        """Single restaurant with ratings, manager, today's bookings and upcoming inventory"""
        try:
            restaurant_uuid = restaurant_id if isinstance(restaurant_id, UUID) else UUID(str(restaurant_id))
        except ValueError:
            raise RestaurantNotFoundError()

        start_of_day = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)

        with persistence_guard(db):
            restaurant = db.query(Restaurant).options(
                joinedload(Restaurant.manager),
                selectinload(Restaurant.availability).selectinload(DateAvailability.tables),
            ).filter(Restaurant.id == restaurant_uuid).first()

            if not restaurant:
                raise RestaurantNotFoundError()

            summary = SearchService.summaries(db, [restaurant])[0]

            summary["bookings_made_today"] = db.query(func.count(Booking.id)).filter(
                Booking.restaurant_id == restaurant.id,
                Booking.created_at >= start_of_day,
                Booking.created_at < start_of_day + timedelta(days=1)
            ).scalar() or 0

        today = start_of_day.date()
        summary["availability"] = [
            {
                "date": entry.date.isoformat(),
                "tables": [
                    {
                        "id": str(table.id),
                        "table_size": table.table_size,
                        "available_times": list(table.available_times or []),
                    }
                    for table in entry.tables
                ],
            }
            for entry in restaurant.availability
            if entry.date >= today
        ]

        return summary

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    @staticmethod
    def summaries(db: Session, restaurants: Iterable[Restaurant]) -> List[Dict[str, Any]]:
        """Attach average rating, review count and manager identity"""
        restaurants = list(restaurants)
        if not restaurants:
            return []

        rows = db.query(
            Review.restaurant_id,
            func.avg(Review.rating),
            func.count(Review.id)
        ).filter(
            Review.restaurant_id.in_([r.id for r in restaurants])
        ).group_by(Review.restaurant_id).all()
        ratings = {restaurant_id: (float(avg or 0), count) for restaurant_id, avg, count in rows}

        return [SearchService._serialize_restaurant(r, *ratings.get(r.id, (0.0, 0))) for r in restaurants]

    @staticmethod
    def _serialize_restaurant(restaurant: Restaurant, average_rating: float, review_count: int) -> Dict[str, Any]:
        manager = restaurant.manager
        return {
            "id": str(restaurant.id),
            "name": restaurant.name,
            "description": restaurant.description,
            "cuisine_type": restaurant.cuisine_type,
            "cost_rating": restaurant.cost_rating,
            "address": restaurant.address(),
            "phone": restaurant.phone,
            "email": restaurant.email,
            "hours": {
                "opening": restaurant.opening_time,
                "closing": restaurant.closing_time,
            },
            "photos": restaurant.photos or [],
            "is_approved": restaurant.is_approved,
            "is_pending": restaurant.is_pending,
            "times_booked_today": restaurant.times_booked_today,
            "average_rating": round(average_rating, 2),
            "review_count": review_count,
            "manager": {
                "id": str(manager.id),
                "first_name": manager.first_name,
                "last_name": manager.last_name,
            } if manager else None,
        }
