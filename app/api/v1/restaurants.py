# ============================================================================
# FILE: app/api/v1/restaurants.py
# Restaurant search (public), registration and manager inventory endpoints
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config.database import get_db
from app.models.user import User
from app.api.dependencies import get_current_active_user, require_manager, require_manager_or_admin
from app.schemas.booking import BookingResponse
from app.schemas.restaurant import (
    DateAvailabilityOut,
    DateAvailabilityRequest,
    RestaurantCreateRequest,
    RestaurantDetail,
    RestaurantSummary,
    RestaurantUpdateRequest,
    SearchResponse,
)
from app.services.booking.booking_query_service import BookingQueryService
from app.services.inventory.inventory_service import InventoryService
from app.services.restaurant.restaurant_service import RestaurantService
from app.services.search.search_service import SearchService

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@router.post("", response_model=RestaurantSummary, status_code=status.HTTP_201_CREATED)
def create_restaurant(
        request: RestaurantCreateRequest,
        current_user: User = Depends(require_manager),
        db: Session = Depends(get_db)
):
    """
    Register a restaurant.
    It starts pending approval and without tables; seed days through the availability endpoint.
    """
    restaurant = RestaurantService.create_restaurant(db=db, manager=current_user, data=request.model_dump())
    return RestaurantService.summary(db, restaurant)


@router.get("/search", response_model=SearchResponse)
def search_restaurants(
        location: Optional[str] = Query(None, description="City (partial, case-insensitive) or exact zip code"),
        date: Optional[str] = Query(None, description="Day to check, YYYY-MM-DD"),
        time: Optional[str] = Query(None, description="Preferred time, HH:MM"),
        party_size: Optional[str] = Query(None, alias="partySize", description="Number of guests"),
        db: Session = Depends(get_db)
):
    """
    Search approved restaurants.
    With date and time, only restaurants with an open table near that time are returned.
    """
    restaurants = SearchService.search(
        db=db,
        location=location,
        date=date,
        time=time,
        party_size=party_size
    )
    return {"restaurants": restaurants, "total": len(restaurants)}


@router.get("/my-restaurants", response_model=List[RestaurantSummary])
def list_my_restaurants(
        current_user: User = Depends(require_manager),
        db: Session = Depends(get_db)
):
    """Restaurants managed by the current user, including ones pending approval."""
    return RestaurantService.list_managed_restaurants(db=db, manager=current_user)


@router.get("/{restaurant_id}", response_model=RestaurantDetail)
def get_restaurant(
        restaurant_id: str = Path(..., description="The restaurant ID"),
        db: Session = Depends(get_db)
):
    """Restaurant details with ratings, today's bookings and upcoming availability."""
    return SearchService.get_restaurant_detail(db=db, restaurant_id=restaurant_id)


@router.put("/{restaurant_id}", response_model=RestaurantSummary)
def update_restaurant(
        request: RestaurantUpdateRequest,
        restaurant_id: str = Path(..., description="The restaurant ID"),
        current_user: User = Depends(require_manager_or_admin),
        db: Session = Depends(get_db)
):
    """Edit listing details. Manager of the restaurant or admin only."""
    restaurant = RestaurantService.update_restaurant(
        db=db,
        restaurant_id=restaurant_id,
        requesting_user=current_user,
        data=request.changes()
    )
    return RestaurantService.summary(db, restaurant)


@router.get("/{restaurant_id}/bookings", response_model=List[BookingResponse])
def list_restaurant_bookings(
        restaurant_id: str = Path(..., description="The restaurant ID"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """All bookings of a restaurant. Manager of the restaurant or admin only."""
    return BookingQueryService.list_restaurant_bookings(
        db=db,
        restaurant_id=restaurant_id,
        requesting_user=current_user
    )


@router.put("/{restaurant_id}/availability/{day}", response_model=DateAvailabilityOut)
def set_availability(
        request: DateAvailabilityRequest,
        restaurant_id: str = Path(..., description="The restaurant ID"),
        day: str = Path(..., description="Day to seed, YYYY-MM-DD"),
        current_user: User = Depends(require_manager_or_admin),
        db: Session = Depends(get_db)
):
    """
    Replace the tables offered on one day.
    Tables sent with their existing id keep it, so bookings stay linked to them.
    Times already booked stay closed, and a table with confirmed bookings cannot be dropped (409).
    """
    restaurant = BookingQueryService.get_managed_restaurant(db, restaurant_id, current_user)

    entry = InventoryService.set_date_availability(
        db=db,
        restaurant_id=restaurant.id,
        day=day,
        tables=request.as_dicts()
    )

    return {
        "date": entry.date.isoformat(),
        "tables": [
            {"id": t.id, "table_size": t.table_size, "available_times": list(t.available_times)}
            for t in entry.tables
        ]
    }
