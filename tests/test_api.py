import uuid
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from conftest import make_restaurant, make_user, seed_tables
from app.api.dependencies import create_access_token
from app.config.database import get_db
from app.main import app
from app.models.restaurant import Restaurant
from app.models.user import UserRole
from app.services.notification.dispatcher import get_notification_dispatcher
from app.services.search.search_service import SearchService


@pytest.fixture
def client(session_factory, dispatcher):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def auth(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


def _create(client, user, restaurant, **overrides):
    body = {"restaurantId": str(restaurant.id), "date": "2024-06-01", "time": "18:00", "partySize": 4}
    body.update(overrides)
    return client.post("/api/v1/bookings", json=body, headers=auth(user))


class TestBookingRoutes:
    def test_create_booking(self, client, db, diner, restaurant, dispatcher):
        seed_tables(db, restaurant, [(4, ["18:00", "18:30"])])

        response = _create(client, diner, restaurant)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "confirmed"
        assert body["date"] == "2024-06-01T00:00:00Z"
        assert body["time"] == "18:00"
        assert body["table_size"] == 4
        assert body["user"]["email"] == diner.email
        assert body["restaurant"]["name"] == "Nopa"
        assert len(dispatcher.events) == 1

    def test_missing_fields(self, client, diner, restaurant):
        response = client.post("/api/v1/bookings", json={"date": "2024-06-01"}, headers=auth(diner))

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "missing_fields"
        assert body["retryable"] is False
        assert body["fields"] == ["restaurantId", "time", "partySize"]

    def test_no_suitable_table(self, client, db, diner, restaurant):
        seed_tables(db, restaurant, [(4, ["18:00"])])

        response = _create(client, diner, restaurant, partySize=5)

        assert response.status_code == 400
        assert response.json()["code"] == "no_suitable_table"

    def test_requires_token(self, client, restaurant):
        response = client.post("/api/v1/bookings", json={"restaurantId": str(restaurant.id)})

        assert response.status_code in (401, 403)

    def test_rejects_garbage_token(self, client):
        response = client.get("/api/v1/bookings/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_cancel_flow(self, client, db, diner, restaurant):
        seed_tables(db, restaurant, [(4, ["18:00"])])
        booking_id = _create(client, diner, restaurant).json()["id"]
        stranger = make_user(db, email="stranger@example.com")

        forbidden = client.patch(f"/api/v1/bookings/{booking_id}/cancel", headers=auth(stranger))
        cancelled = client.patch(f"/api/v1/bookings/{booking_id}/cancel", headers=auth(diner))
        again = client.patch(f"/api/v1/bookings/{booking_id}/cancel", headers=auth(diner))

        assert forbidden.status_code == 403
        assert forbidden.json()["code"] == "not_authorized"
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"
        assert again.status_code == 409
        assert again.json()["code"] == "already_cancelled"

    def test_cancel_unknown_booking(self, client, diner):
        response = client.patch("/api/v1/bookings/not-a-booking/cancel", headers=auth(diner))

        assert response.status_code == 404
        assert response.json()["code"] == "booking_not_found"

    def test_my_bookings_newest_first(self, client, db, diner, restaurant):
        seed_tables(db, restaurant, [(4, ["18:00"])])
        seed_tables(db, restaurant, [(4, ["18:00"])], day="2024-06-03")
        _create(client, diner, restaurant)
        _create(client, diner, restaurant, date="2024-06-03")

        response = client.get("/api/v1/bookings/me", headers=auth(diner))

        assert response.status_code == 200
        assert [b["date"][:10] for b in response.json()] == ["2024-06-03", "2024-06-01"]


class TestRestaurantRoutes:
    def test_search_with_tolerance(self, client, db, restaurant):
        seed_tables(db, restaurant, [(4, ["18:00"])])

        response = client.get(
            "/api/v1/restaurants/search",
            params={"date": "2024-06-01", "time": "18:15", "partySize": "2"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["restaurants"][0]["name"] == "Nopa"
        assert body["restaurants"][0]["average_rating"] == 0

    def test_search_bad_time(self, client):
        response = client.get("/api/v1/restaurants/search", params={"date": "2024-06-01", "time": "25:00"})

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_time_format"

    def test_restaurant_detail(self, client, restaurant):
        response = client.get(f"/api/v1/restaurants/{restaurant.id}")

        assert response.status_code == 200
        assert response.json()["bookings_made_today"] == 0

    def test_restaurant_bookings_for_manager_only(self, client, db, diner, manager, restaurant):
        seed_tables(db, restaurant, [(4, ["18:00"])])
        _create(client, diner, restaurant)

        as_manager = client.get(f"/api/v1/restaurants/{restaurant.id}/bookings", headers=auth(manager))
        as_diner = client.get(f"/api/v1/restaurants/{restaurant.id}/bookings", headers=auth(diner))

        assert as_manager.status_code == 200
        assert len(as_manager.json()) == 1
        assert as_diner.status_code == 403

    def test_manager_seeds_availability(self, client, db, manager, restaurant):
        response = client.put(
            f"/api/v1/restaurants/{restaurant.id}/availability/2024-06-01",
            json={"tables": [{"tableSize": 4, "availableTimes": ["18:30", "18:00"]}]},
            headers=auth(manager),
        )

        assert response.status_code == 200
        assert response.json()["tables"][0]["available_times"] == ["18:00", "18:30"]

    def test_other_manager_cannot_seed(self, client, db, restaurant):
        rival = make_user(db, email="rival@example.com", role=UserRole.MANAGER)
        make_restaurant(db, rival, name="Rival Bistro")

        response = client.put(
            f"/api/v1/restaurants/{restaurant.id}/availability/2024-06-01",
            json={"tables": [{"table_size": 2, "available_times": ["18:00"]}]},
            headers=auth(rival),
        )

        assert response.status_code == 403

    def test_diner_cannot_seed(self, client, diner, restaurant):
        response = client.put(
            f"/api/v1/restaurants/{restaurant.id}/availability/2024-06-01",
            json={"tables": [{"table_size": 2, "available_times": ["18:00"]}]},
            headers=auth(diner),
        )

        assert response.status_code == 403


class TestAdminAndHealth:
    def test_consistency_faults_admin_only(self, client, admin, diner):
        assert client.get("/api/v1/admin/consistency-faults", headers=auth(admin)).json() == []
        assert client.get("/api/v1/admin/consistency-faults", headers=auth(diner)).status_code == 403

    def test_health(self, client):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRestaurantRegistration:
    NEW_LISTING = {
        "name": "Tartine Manufactory",
        "cuisineType": "Bakery",
        "costRating": 2,
        "address": {"street": "595 Alabama St", "city": "San Francisco", "state": "CA", "zipCode": "94110"},
        "hours": {"opening": "8:00", "closing": "22:00"},
    }

    def test_manager_registers_pending_restaurant(self, client, manager):
        response = client.post("/api/v1/restaurants", json=self.NEW_LISTING, headers=auth(manager))

        assert response.status_code == 201
        body = response.json()
        assert body["is_pending"] is True
        assert body["is_approved"] is False
        assert body["address"]["zip_code"] == "94110"
        assert body["hours"] == {"opening": "08:00", "closing": "22:00"}
        assert body["manager"]["id"] == str(manager.id)

        detail = client.get(f"/api/v1/restaurants/{body['id']}").json()
        assert detail["availability"] == []
        assert client.get("/api/v1/restaurants/search", params={"location": "94110"}).json()["total"] == 0

    def test_only_managers_register(self, client, diner):
        response = client.post("/api/v1/restaurants", json=self.NEW_LISTING, headers=auth(diner))

        assert response.status_code == 403

    def test_bad_opening_time(self, client, manager):
        listing = dict(self.NEW_LISTING, hours={"opening": "8am"})

        response = client.post("/api/v1/restaurants", json=listing, headers=auth(manager))

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_time_format"

    def test_my_restaurants_lists_own_listings_only(self, client, db, manager, restaurant):
        rival = make_user(db, email="rival@example.com", role=UserRole.MANAGER)
        make_restaurant(db, rival, name="Rival Bistro")
        client.post("/api/v1/restaurants", json=self.NEW_LISTING, headers=auth(manager))

        response = client.get("/api/v1/restaurants/my-restaurants", headers=auth(manager))

        assert response.status_code == 200
        assert [r["name"] for r in response.json()] == ["Nopa", "Tartine Manufactory"]

    def test_update_by_owner_and_not_by_rival(self, client, db, manager, restaurant):
        rival = make_user(db, email="rival@example.com", role=UserRole.MANAGER)

        updated = client.put(
            f"/api/v1/restaurants/{restaurant.id}",
            json={"description": "Wood-fired dinner", "hours": {"closing": "23:30"}},
            headers=auth(manager),
        )
        denied = client.put(f"/api/v1/restaurants/{restaurant.id}", json={"name": "Mine"}, headers=auth(rival))

        assert updated.status_code == 200
        assert updated.json()["description"] == "Wood-fired dinner"
        assert updated.json()["hours"]["closing"] == "23:30"
        assert updated.json()["name"] == "Nopa"
        assert denied.status_code == 403

    def test_registered_restaurant_is_bookable_once_approved_and_seeded(self, client, db, manager, diner):
        restaurant_id = client.post("/api/v1/restaurants", json=self.NEW_LISTING, headers=auth(manager)).json()["id"]
        restaurant = db.get(Restaurant, uuid.UUID(restaurant_id))
        restaurant.is_approved, restaurant.is_pending = True, False
        db.commit()

        seeded = client.put(
            f"/api/v1/restaurants/{restaurant_id}/availability/2024-06-01",
            json={"tables": [{"tableSize": 2, "availableTimes": ["09:00"]}]},
            headers=auth(manager),
        )
        found = client.get(
            "/api/v1/restaurants/search",
            params={"location": "94110", "date": "2024-06-01", "time": "09:00", "partySize": "2"},
        )
        booked = client.post(
            "/api/v1/bookings",
            json={"restaurantId": restaurant_id, "date": "2024-06-01", "time": "09:00", "partySize": 2},
            headers=auth(diner),
        )

        assert seeded.status_code == 200
        assert found.json()["total"] == 1
        assert booked.status_code == 201


class TestReseedingWithBookings:
    def test_dropping_a_booked_table_is_a_conflict(self, client, db, diner, manager, restaurant):
        entry = seed_tables(db, restaurant, [(4, ["18:00"]), (2, ["18:00"])])
        spare_id = str(entry.tables[1].id)
        _create(client, diner, restaurant)

        response = client.put(
            f"/api/v1/restaurants/{restaurant.id}/availability/2024-06-01",
            json={"tables": [{"id": spare_id, "table_size": 2, "available_times": ["18:00"]}]},
            headers=auth(manager),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "inventory_in_use"

    def test_resending_layout_keeps_booked_slot_closed(self, client, db, diner, manager, restaurant):
        entry = seed_tables(db, restaurant, [(4, ["18:00"])])
        table_id = str(entry.tables[0].id)
        _create(client, diner, restaurant)
        second = make_user(db, email="second@example.com")

        reseeded = client.put(
            f"/api/v1/restaurants/{restaurant.id}/availability/2024-06-01",
            json={"tables": [{"id": table_id, "table_size": 4, "available_times": ["18:00"]}]},
            headers=auth(manager),
        )
        again = _create(client, second, restaurant)

        assert reseeded.json()["tables"][0]["available_times"] == []
        assert again.status_code == 400
        assert again.json()["code"] == "no_suitable_table"


class TestStoreOutagesAndTracing:
    def test_unguarded_store_failure_is_a_retryable_503(self, client):
        timeout = OperationalError("SELECT ...", {}, Exception("statement timeout"))

        with patch.object(SearchService, "search", side_effect=timeout):
            response = client.get("/api/v1/restaurants/search")

        assert response.status_code == 503
        assert response.json() == {
            "error": "The reservation store is temporarily unavailable",
            "code": "persistence_unavailable",
            "retryable": True,
        }

    def test_correlation_id_is_echoed(self, client, restaurant):
        response = client.get(f"/api/v1/restaurants/{restaurant.id}", headers={"X-Correlation-ID": "req-42"})

        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_correlation_id_is_minted_when_absent(self, client):
        response = client.get("/health/")

        assert response.headers["X-Correlation-ID"]
