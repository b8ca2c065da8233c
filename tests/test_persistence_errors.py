from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from conftest import BOOKING_DAY
from app.core.exceptions import PersistenceUnavailableError
from app.services.booking.booking_query_service import BookingQueryService
from app.services.inventory.inventory_service import InventoryService
from app.services.restaurant.restaurant_service import RestaurantService
from app.services.search.search_service import SearchService


def _statement_timeout():
    return OperationalError("SELECT ...", {}, Exception("canceling statement due to statement timeout"))


@pytest.fixture
def store_down(db):
    """Every query on the session fails the way a timed-out statement does"""
    with patch.object(db, "query", side_effect=_statement_timeout()), \
            patch.object(db, "get", side_effect=_statement_timeout()):
        yield db


def test_search_reports_typed_retryable_error(store_down):
    with pytest.raises(PersistenceUnavailableError) as exc_info:
        SearchService.search(store_down, date="2024-06-01", time="18:00")

    assert exc_info.value.retryable is True
    assert exc_info.value.status_code == 503


def test_restaurant_detail_reports_typed_error(db, restaurant):
    restaurant_id = restaurant.id

    with patch.object(db, "query", side_effect=_statement_timeout()):
        with pytest.raises(PersistenceUnavailableError):
            SearchService.get_restaurant_detail(db, str(restaurant_id))


def test_booking_listings_report_typed_error(db, diner, manager, restaurant):
    user_id = diner.id

    with patch.object(db, "query", side_effect=_statement_timeout()):
        with pytest.raises(PersistenceUnavailableError):
            BookingQueryService.list_user_bookings(db, user_id)

        with pytest.raises(PersistenceUnavailableError):
            BookingQueryService.list_restaurant_bookings(db, restaurant.id, manager)


def test_pool_exhaustion_during_seeding_is_typed(db, restaurant):
    restaurant_id = restaurant.id

    with patch.object(db, "get", side_effect=PoolTimeoutError("QueuePool limit reached")):
        with pytest.raises(PersistenceUnavailableError):
            InventoryService.set_date_availability(db, restaurant_id, BOOKING_DAY, [
                {"table_size": 4, "available_times": ["18:00"]},
            ])


def test_managed_restaurant_listing_reports_typed_error(manager, store_down):
    with pytest.raises(PersistenceUnavailableError):
        RestaurantService.list_managed_restaurants(store_down, manager)
