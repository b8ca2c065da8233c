# app/models/restaurant.py
"""
Restaurant listing and its per-date table inventory.

Inventory is normalized into rows: one DateAvailability per (restaurant, UTC
day) and one TableDefinition row per table class on that day. Each
TableDefinition carries a version counter so that two writers holding the
same snapshot cannot both consume a slot.
"""
from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, JSON, Text, Integer, ForeignKey,
    CheckConstraint, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    cuisine_type = Column(String(100), nullable=False)
    cost_rating = Column(Integer, nullable=True)  # 1-4

    # Address
    street = Column(String(200), nullable=True)
    city = Column(String(100), nullable=True, index=True)
    state = Column(String(100), nullable=True)
    zip_code = Column(String(20), nullable=True, index=True)

    # Contact info
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)

    # Opening hours, HH:MM format
    opening_time = Column(String(5), nullable=True)
    closing_time = Column(String(5), nullable=True)

    photos = Column(JSON, default=list)

    manager_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Moderation flags
    is_approved = Column(Boolean, default=False, nullable=False)
    is_pending = Column(Boolean, default=True, nullable=False)

    # Display-only, not part of the inventory invariant. Zeroed at 00:00 UTC by
    # app.tasks.maintenance_tasks.reset_daily_booking_counters
    times_booked_today = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    manager = relationship("User", back_populates="managed_restaurants")
    availability = relationship(
        "DateAvailability",
        back_populates="restaurant",
        order_by="DateAvailability.date",
        cascade="all, delete-orphan",
    )
    reviews = relationship("Review", back_populates="restaurant", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("cost_rating IS NULL OR (cost_rating BETWEEN 1 AND 4)", name="ck_restaurants_cost_rating"),
    )

    def address(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
        }

    def __repr__(self):
        return f"<Restaurant(id={self.id}, name={self.name})>"


class DateAvailability(Base):
    """All bookable tables of one restaurant for one UTC day"""
    __tablename__ = "date_availabilities"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(
        Uuid(as_uuid=True), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    date = Column(Date, nullable=False)

    restaurant = relationship("Restaurant", back_populates="availability")
    tables = relationship(
        "TableDefinition",
        back_populates="date_availability",
        order_by="TableDefinition.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("restaurant_id", "date", name="uq_date_availabilities_restaurant_date"),
    )

    def __repr__(self):
        return f"<DateAvailability(restaurant_id={self.restaurant_id}, date={self.date})>"


class TableDefinition(Base):
    """One table class on one day: its capacity and the times still open"""
    __tablename__ = "table_definitions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    date_availability_id = Column(
        Uuid(as_uuid=True), ForeignKey("date_availabilities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)  # insertion order
    table_size = Column(Integer, nullable=False)
    available_times = Column(JSON, nullable=False, default=list)  # sorted "HH:MM" strings
    version = Column(Integer, nullable=False)

    date_availability = relationship("DateAvailability", back_populates="tables")

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("table_size >= 1", name="ck_table_definitions_table_size"),
    )

    def has_time(self, time_str: str) -> bool:
        return time_str in (self.available_times or [])

    def __repr__(self):
        return f"<TableDefinition(id={self.id}, size={self.table_size}, times={self.available_times})>"
