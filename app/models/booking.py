# ===== app/models/booking.py =====
from sqlalchemy import Column, String, Integer, Date, DateTime, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.models.base import Base
import enum
import uuid


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(Base):
    """
    A reservation. Bookings are never deleted; cancelling flips the status.

    A confirmed booking is what makes its slot unavailable: the slot's absence
    from TableDefinition.available_times is a projection kept in step by
    BookingService.
    """
    __tablename__ = "bookings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    restaurant_id = Column(Uuid(as_uuid=True), ForeignKey("restaurants.id"), nullable=False, index=True)

    # Reservation details
    date = Column(Date, nullable=False)  # UTC day
    time = Column(String(5), nullable=False)  # HH:MM format
    party_size = Column(Integer, nullable=False)
    table_size = Column(Integer, nullable=False)  # copy of the matched table's capacity

    # Exact table definition consumed. NULL on bookings created before it existed.
    booked_table_definition_id = Column(Uuid(as_uuid=True), nullable=True, index=True)

    status = Column(String(20), default=BookingStatus.CONFIRMED.value, nullable=False)  # confirmed, cancelled

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="bookings")
    restaurant = relationship("Restaurant")

    __table_args__ = (
        CheckConstraint("party_size >= 1", name="ck_bookings_party_size"),
        Index("ix_bookings_restaurant_date", "restaurant_id", "date"),
    )

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    def __repr__(self):
        return f"<Booking(id={self.id}, date={self.date}, time={self.time}, status={self.status})>"
