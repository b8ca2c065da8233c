# ============================================================================
# app/services/booking/booking_service.py
# Booking lifecycle: create and cancel, keeping bookings and inventory in step
# ============================================================================
"""
Service for creating and cancelling bookings.

Create: validate -> match -> write booking -> consume slot, committed as one
transaction. A concurrent writer that consumed the same table first makes the
inventory UPDATE miss its version, in which case the attempt is rolled back
and matched again against fresh state.

Cancel: the status flip is the only step that decides success. Inventory
repair afterwards is best-effort; anything it cannot fix is recorded as a
ConsistencyFault.

Counter, email and notification record run after the commit and never fail
the request.
"""
from datetime import datetime, timezone
from typing import Any, Optional, Union
from uuid import UUID
import enum
import logging

from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from app.config.database import persistence_guard
from app.config.settings import settings
from app.core.exceptions import (
    AlreadyCancelledError,
    BookingNotFoundError,
    InvalidPartySizeError,
    MissingFieldsError,
    NoAvailabilityForDateError,
    NoSuitableTableError,
    NotAuthorizedError,
    RestaurantNotFoundError,
    SlotNoLongerAvailableError,
    SlotNotFoundError,
)
from app.models.booking import Booking, BookingStatus
from app.models.consistency_fault import ConsistencyFault, ConsistencyFaultKind
from app.models.notification import NotificationType
from app.models.restaurant import DateAvailability, Restaurant, TableDefinition
from app.models.user import User
from app.services.availability.availability_matcher import AvailabilityMatcher
from app.services.inventory.inventory_service import InventoryService
from app.services.notification.dispatcher import (
    BookingEvent,
    NotificationDispatcher,
    booking_message,
    get_notification_dispatcher,
)
from app.utils.time_utils import canonical_hhmm, normalize_utc_day

logger = logging.getLogger(__name__)


class ReleaseStrategy(str, enum.Enum):
    """How cancellation finds the table definition to give the slot back to"""
    BY_EXACT_TABLE = "by_exact_table"
    # Legacy bookings without booked_table_definition_id. Lossy: cannot tell
    # apart two tables of the same size.
    BY_CLOSEST_SIZE_MATCH = "by_closest_size_match"


def _as_uuid(value: Union[str, UUID, None]) -> Optional[UUID]:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class BookingService:
    """Handles booking lifecycle transitions"""

    def __init__(self, db: Session, dispatcher: Optional[NotificationDispatcher] = None):
        self.db = db
        self.dispatcher = dispatcher or get_notification_dispatcher()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_booking(
            self,
            user: User,
            restaurant_id: Union[str, UUID, None],
            date: Any,
            time: Optional[str],
            party_size: Any
    ) -> Booking:
        """
        Book the first table that fits the party at the exact requested time.

        Raises:
            MissingFieldsError, InvalidPartySizeError, InvalidTimeFormatError,
            InvalidDateError: bad input, nothing written
            RestaurantNotFoundError: unknown restaurant
            NoAvailabilityForDateError, NoSuitableTableError: nothing to book
            SlotNoLongerAvailableError: lost a race for the last matching slot
            PersistenceUnavailableError: the store timed out or is down
        """
        missing = [
            name for name, value in (
                ("restaurantId", restaurant_id),
                ("date", date),
                ("time", time),
                ("partySize", party_size),
            )
            if _is_blank(value)
        ]
        if missing:
            raise MissingFieldsError(missing)

        numeric_party_size = self.parse_party_size(party_size)
        time_str = canonical_hhmm(time)
        day = normalize_utc_day(date)

        with persistence_guard(self.db):
            restaurant = self._get_restaurant(restaurant_id)
            booking = self._reserve(user, restaurant, day, time_str, numeric_party_size)

        logger.info(
            f"Booking {booking.id} confirmed: restaurant {restaurant.id}, {day.isoformat()} {time_str}, "
            f"party of {numeric_party_size}, table {booking.booked_table_definition_id}"
        )

        self._increment_daily_counter(restaurant.id)

        joined = self._load_joined(booking.id) or booking
        self._emit(BookingEvent.CONFIRMED, joined)
        return joined

    @staticmethod
    def parse_party_size(value: Any) -> int:
        """Positive integer or InvalidPartySizeError"""
        if isinstance(value, bool):
            raise InvalidPartySizeError()

        if isinstance(value, int):
            numeric = value
        elif isinstance(value, float) and value.is_integer():
            numeric = int(value)
        elif isinstance(value, str):
            try:
                numeric = int(value.strip())
            except ValueError:
                raise InvalidPartySizeError()
        else:
            raise InvalidPartySizeError()

        if numeric <= 0:
            raise InvalidPartySizeError()
        return numeric

    def _get_restaurant(self, restaurant_id: Union[str, UUID]) -> Restaurant:
        restaurant_uuid = _as_uuid(restaurant_id)
        restaurant = self.db.get(Restaurant, restaurant_uuid) if restaurant_uuid else None
        if restaurant is None:
            raise RestaurantNotFoundError()
        return restaurant

    def _reserve(self, user: User, restaurant: Restaurant, day, time_str: str, party_size: int) -> Booking:
        """Match, write booking, consume slot, commit; retry on version conflicts"""
        conflicted = False
        max_attempts = settings.BOOKING_CONFLICT_RETRIES + 1

        for attempt in range(1, max_attempts + 1):
            try:
                table = AvailabilityMatcher.find_table(self.db, restaurant, day, time_str, party_size)
            except (NoAvailabilityForDateError, NoSuitableTableError) as e:
                if conflicted:
                    # Whatever we raced for is gone now
                    raise SlotNoLongerAvailableError() from e
                raise

            booking = Booking(
                user_id=user.id,
                restaurant_id=restaurant.id,
                date=day,
                time=time_str,
                party_size=party_size,
                table_size=table.table_size,
                booked_table_definition_id=table.id,
                status=BookingStatus.CONFIRMED.value,
            )

            try:
                # The booking row is written before the inventory row
                self.db.add(booking)
                self.db.flush()
                InventoryService.consume_slot(self.db, table.id, time_str)
                self.db.commit()
                return booking
            except (StaleDataError, SlotNotFoundError) as e:
                self.db.rollback()
                conflicted = True
                logger.warning(
                    f"Slot conflict on table {table.id} at {time_str} {day.isoformat()} "
                    f"(attempt {attempt}/{max_attempts}): {e}"
                )

        raise SlotNoLongerAvailableError()

    def _increment_daily_counter(self, restaurant_id: UUID) -> None:
        """Display-only counter; failures are logged and ignored"""
        try:
            self.db.query(Restaurant).filter(Restaurant.id == restaurant_id).update(
                {Restaurant.times_booked_today: Restaurant.times_booked_today + 1},
                synchronize_session=False,
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to increment daily booking counter for restaurant {restaurant_id}: {e}")

    # ------------------------------------------------------------------
    # Cancel
    # ------------------------------------------------------------------

    def cancel_booking(self, booking_id: Union[str, UUID], requesting_user: User) -> Booking:
        """
        Cancel a booking owned by the requesting user (or any booking, for admins).

        Raises:
            BookingNotFoundError: unknown id
            NotAuthorizedError: neither owner nor admin
            AlreadyCancelledError: second cancel of the same booking
        """
        booking_uuid = _as_uuid(booking_id)

        with persistence_guard(self.db):
            booking = self.db.get(Booking, booking_uuid) if booking_uuid else None
            if booking is None:
                raise BookingNotFoundError()

            if booking.user_id != requesting_user.id and not requesting_user.is_admin():
                raise NotAuthorizedError("Not authorized to cancel this booking")

            if booking.is_cancelled:
                raise AlreadyCancelledError()

            # Conditional flip: only one of two concurrent cancels can win
            flipped = self.db.query(Booking).filter(
                Booking.id == booking.id,
                Booking.status == BookingStatus.CONFIRMED.value
            ).update(
                {
                    Booking.status: BookingStatus.CANCELLED.value,
                    Booking.cancelled_at: datetime.now(timezone.utc),
                },
                synchronize_session=False,
            )
            self.db.commit()

            if not flipped:
                raise AlreadyCancelledError()

            self.db.refresh(booking)

        logger.info(f"Booking {booking.id} cancelled by user {requesting_user.id}")

        try:
            self._repair_inventory(booking)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Inventory repair failed for cancelled booking {booking.id}: {e}")

        joined = self._load_joined(booking.id) or booking
        self._emit(BookingEvent.CANCELLED, joined)
        return joined

    def _repair_inventory(self, booking: Booking) -> Optional[ConsistencyFaultKind]:
        """Give the booking's slot back. Returns the fault kind when it cannot."""
        strategy = (
            ReleaseStrategy.BY_EXACT_TABLE
            if booking.booked_table_definition_id
            else ReleaseStrategy.BY_CLOSEST_SIZE_MATCH
        )
        day_str = booking.date.isoformat()
        attempts = settings.BOOKING_CONFLICT_RETRIES + 1

        for _ in range(attempts):
            try:
                restaurant = self.db.get(Restaurant, booking.restaurant_id)
                if restaurant is None:
                    return self._record_fault(
                        ConsistencyFaultKind.RESTAURANT_MISSING, booking,
                        f"Restaurant {booking.restaurant_id} not found"
                    )

                entry = InventoryService.get_date_availability(self.db, restaurant.id, booking.date)
                if entry is None:
                    return self._record_fault(
                        ConsistencyFaultKind.DATE_ENTRY_MISSING, booking,
                        f"No availability entry for {day_str}"
                    )

                table = self._locate_table(entry, booking, strategy)
                if table is None:
                    if strategy == ReleaseStrategy.BY_EXACT_TABLE:
                        return self._record_fault(
                            ConsistencyFaultKind.TABLE_DEFINITION_MISSING, booking,
                            f"Table definition {booking.booked_table_definition_id} "
                            f"(size {booking.table_size}) not found for {day_str}"
                        )
                    return self._record_fault(
                        ConsistencyFaultKind.LEGACY_SIZE_MATCH_MISSING, booking,
                        f"No table of size {booking.table_size} with {booking.time} booked on {day_str}"
                    )

                released = InventoryService.release_on_table(self.db, table, booking.time)
                self.db.commit()

                if released:
                    logger.info(f"Released {booking.time} on table {table.id} for booking {booking.id}")
                else:
                    logger.info(f"Slot {booking.time} on table {table.id} was already open (booking {booking.id})")
                return None

            except StaleDataError:
                self.db.rollback()
                logger.warning(f"Release conflict for booking {booking.id}, retrying with fresh state")

        return self._record_fault(
            ConsistencyFaultKind.RELEASE_CONFLICT, booking,
            f"Gave up releasing {booking.time} after {attempts} conflicting attempts"
        )

    @staticmethod
    def _locate_table(
            entry: DateAvailability,
            booking: Booking,
            strategy: ReleaseStrategy
    ) -> Optional[TableDefinition]:
        if strategy == ReleaseStrategy.BY_EXACT_TABLE:
            return next((t for t in entry.tables if t.id == booking.booked_table_definition_id), None)

        logger.warning(
            f"Booking {booking.id} has no booked_table_definition_id. "
            f"Falling back to table size match, which cannot tell same-size tables apart."
        )
        # Only tables where this time is currently taken can be the one we booked
        candidates = [
            t for t in entry.tables
            if not t.has_time(booking.time) and t.table_size >= booking.party_size
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda t: (abs(t.table_size - booking.table_size), t.position))

    def _record_fault(self, kind: ConsistencyFaultKind, booking: Booking, detail: str) -> ConsistencyFaultKind:
        logger.error(
            f"Consistency fault ({kind.value}) while cancelling booking {booking.id} "
            f"in restaurant {booking.restaurant_id}: {detail}"
        )
        try:
            self.db.add(ConsistencyFault(
                kind=kind.value,
                booking_id=booking.id,
                restaurant_id=booking.restaurant_id,
                detail=detail,
            ))
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to record consistency fault for booking {booking.id}: {e}")
        return kind

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _load_joined(self, booking_id: UUID) -> Optional[Booking]:
        """Booking with user and restaurant loaded, or None if the lookup fails"""
        try:
            return self.db.query(Booking).options(
                joinedload(Booking.user),
                joinedload(Booking.restaurant),
            ).filter(Booking.id == booking_id).first()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to load joined view for booking {booking_id}: {e}")
            return None

    def _emit(self, event_type: BookingEvent, booking: Booking) -> None:
        """Email + notification record, both best-effort"""
        user = booking.user
        restaurant = booking.restaurant
        if user is None or restaurant is None:
            logger.error(f"Cannot notify for booking {booking.id}: user or restaurant missing")
            return

        try:
            self.dispatcher.dispatch(event_type, user, booking, restaurant)
        except Exception as e:
            logger.error(f"Dispatcher failed for {event_type.value} on booking {booking.id}: {e}")

        notification_type = (
            NotificationType.BOOKING_CONFIRMED
            if event_type == BookingEvent.CONFIRMED
            else NotificationType.BOOKING_CANCELLED
        )
        try:
            self.dispatcher.record_notification(
                user.id,
                booking_message(event_type, restaurant.name, booking.date, booking.time),
                notification_type,
                booking.id,
            )
        except Exception as e:
            logger.error(f"Failed to create {notification_type.value} notification for booking {booking.id}: {e}")
