import uuid

import pytest

from conftest import BOOKING_DAY, add_review, make_restaurant, make_user, seed_tables
from app.core.exceptions import InvalidTimeFormatError, RestaurantNotFoundError
from app.models.booking import Booking
from app.services.search.search_service import SearchService


def _names(results):
    return sorted(r["name"] for r in results)


def test_matches_slot_inside_tolerance_window(db, restaurant):
    seed_tables(db, restaurant, [(4, ["18:00"])])

    results = SearchService.search(db, date="2024-06-01", time="18:15", party_size="2")

    assert _names(results) == ["Nopa"]


def test_slot_outside_window_does_not_match(db, restaurant):
    seed_tables(db, restaurant, [(4, ["19:00"])])

    assert SearchService.search(db, date="2024-06-01", time="18:15", party_size="2") == []


def test_window_bounds_are_inclusive(db, restaurant):
    seed_tables(db, restaurant, [(4, ["18:45"])])

    assert _names(SearchService.search(db, date="2024-06-01", time="18:15")) == ["Nopa"]


def test_party_size_filters_small_tables(db, restaurant):
    seed_tables(db, restaurant, [(2, ["18:00"])])

    assert SearchService.search(db, date="2024-06-01", time="18:00", party_size="4") == []


@pytest.mark.parametrize("party_size", ["lots", "0", "-2", None])
def test_invalid_party_size_drops_size_filter(db, restaurant, party_size):
    seed_tables(db, restaurant, [(2, ["18:00"])])

    results = SearchService.search(db, date="2024-06-01", time="18:00", party_size=party_size)

    assert _names(results) == ["Nopa"]


def test_invalid_time_is_rejected(db, restaurant):
    with pytest.raises(InvalidTimeFormatError):
        SearchService.search(db, date="2024-06-01", time="quarter past six")


def test_unapproved_restaurants_are_hidden(db, manager, restaurant):
    hidden = make_restaurant(db, manager, name="Pending Place", is_approved=False)
    seed_tables(db, hidden, [(4, ["18:00"])])
    seed_tables(db, restaurant, [(4, ["18:00"])])

    assert _names(SearchService.search(db)) == ["Nopa"]
    assert _names(SearchService.search(db, date="2024-06-01", time="18:00")) == ["Nopa"]


def test_location_matches_city_substring_or_exact_zip(db, manager, restaurant):
    make_restaurant(db, manager, name="Chez Panisse", city="Berkeley", zip_code="94709")

    assert _names(SearchService.search(db, location="francisco")) == ["Nopa"]
    assert _names(SearchService.search(db, location="94709")) == ["Chez Panisse"]
    assert SearchService.search(db, location="947") == []


def test_without_date_and_time_inventory_is_ignored(db, manager, restaurant):
    make_restaurant(db, manager, name="Zuni Cafe")

    assert _names(SearchService.search(db, time="18:00")) == ["Nopa", "Zuni Cafe"]


def test_ratings_and_manager_are_attached(db, manager, diner, restaurant):
    critic = make_user(db, email="critic@example.com")
    add_review(db, restaurant, diner, 5)
    add_review(db, restaurant, critic, 4)
    unrated = make_restaurant(db, manager, name="Zuni Cafe")

    results = {r["name"]: r for r in SearchService.search(db)}

    assert results["Nopa"]["average_rating"] == 4.5
    assert results["Nopa"]["review_count"] == 2
    assert results[unrated.name]["average_rating"] == 0
    assert results[unrated.name]["review_count"] == 0
    assert results["Nopa"]["manager"] == {
        "id": str(manager.id),
        "first_name": "Mia",
        "last_name": "Manager",
    }


def test_restaurant_detail(db, diner, restaurant):
    entry = seed_tables(db, restaurant, [(4, ["18:00"])], day=BOOKING_DAY)
    db.add(Booking(
        user_id=diner.id,
        restaurant_id=restaurant.id,
        date=BOOKING_DAY,
        time="18:00",
        party_size=2,
        table_size=4,
        booked_table_definition_id=entry.tables[0].id,
    ))
    db.commit()

    detail = SearchService.get_restaurant_detail(db, str(restaurant.id))

    assert detail["name"] == "Nopa"
    assert detail["bookings_made_today"] == 1
    # 2024-06-01 is in the past, so it is not listed as upcoming
    assert detail["availability"] == []


def test_restaurant_detail_not_found(db):
    with pytest.raises(RestaurantNotFoundError):
        SearchService.get_restaurant_detail(db, str(uuid.uuid4()))

    with pytest.raises(RestaurantNotFoundError):
        SearchService.get_restaurant_detail(db, "nope")


def test_results_are_ordered_by_name(db, manager):
    for name in ("Zuni Cafe", "Atelier Crenn", "Nopa"):
        seed_tables(db, make_restaurant(db, manager, name=name), [(4, ["18:00"])])

    listed = [r["name"] for r in SearchService.search(db, location="San Francisco")]
    windowed = [r["name"] for r in SearchService.search(db, date="2024-06-01", time="18:00")]

    assert listed == ["Atelier Crenn", "Nopa", "Zuni Cafe"]
    assert windowed == listed
