import os

# Must be set before app.config.settings is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.models import Base, Restaurant, Review, User, UserRole
from app.services.inventory.inventory_service import InventoryService

BOOKING_DAY = date(2024, 6, 1)


class RecordingDispatcher:
    """Collects lifecycle events instead of queueing Celery tasks"""

    def __init__(self):
        self.events = []
        self.notifications = []

    def dispatch(self, event_type, user, booking, restaurant):
        self.events.append((event_type, booking.id, user.email, restaurant.name))
        return True

    def record_notification(self, user_id, message, notification_type, booking_id):
        self.notifications.append((user_id, message, notification_type, booking_id))
        return True


class FailingDispatcher:
    """A dispatcher whose transport is down"""

    def dispatch(self, event_type, user, booking, restaurant):
        raise RuntimeError("broker unreachable")

    def record_notification(self, user_id, message, notification_type, booking_id):
        raise RuntimeError("broker unreachable")


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'booktable.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


# ----------------------------------------------------------------------------
# Factories
# ----------------------------------------------------------------------------

def make_user(db, email="diner@example.com", role=UserRole.CUSTOMER, first_name="Dana", last_name="Diner"):
    user = User(
        email=email,
        hashed_password="not-a-real-hash",
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_restaurant(db, manager, name="Nopa", city="San Francisco", zip_code="94117", is_approved=True, **extra):
    restaurant = Restaurant(
        name=name,
        cuisine_type="Californian",
        cost_rating=2,
        street="560 Divisadero St",
        city=city,
        state="CA",
        zip_code=zip_code,
        manager_id=manager.id,
        is_approved=is_approved,
        is_pending=not is_approved,
        **extra,
    )
    db.add(restaurant)
    db.commit()
    db.refresh(restaurant)
    return restaurant


def seed_tables(db, restaurant, tables, day=BOOKING_DAY):
    """tables: list of (table_size, [times])"""
    return InventoryService.set_date_availability(
        db,
        restaurant.id,
        day,
        [{"table_size": size, "available_times": times} for size, times in tables],
    )


def add_review(db, restaurant, user, rating):
    db.add(Review(restaurant_id=restaurant.id, user_id=user.id, rating=rating))
    db.commit()


@pytest.fixture
def manager(db):
    return make_user(db, email="manager@example.com", role=UserRole.MANAGER, first_name="Mia", last_name="Manager")


@pytest.fixture
def diner(db):
    return make_user(db)


@pytest.fixture
def admin(db):
    return make_user(db, email="admin@example.com", role=UserRole.ADMIN, first_name="Ada", last_name="Admin")


@pytest.fixture
def restaurant(db, manager):
    return make_restaurant(db, manager)
