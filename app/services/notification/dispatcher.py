# ===== app/services/notification/dispatcher.py =====
"""
Best-effort delivery of booking lifecycle events.

The booking engine only knows the NotificationDispatcher contract. The
default implementation publishes Celery tasks that retry on their own; a
publish failure is logged and reported as False, never raised.
"""
from datetime import date
from typing import Optional, Protocol
from uuid import UUID
import enum
import logging

from app.models.booking import Booking
from app.models.notification import NotificationType
from app.models.restaurant import Restaurant
from app.models.user import User
from app.schemas.task_payloads import BookingEmailPayload, NotificationRecordPayload

logger = logging.getLogger(__name__)


class BookingEvent(str, enum.Enum):
    CONFIRMED = "BookingConfirmed"
    CANCELLED = "BookingCancelled"


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def booking_message(event_type: BookingEvent, restaurant_name: str, day: date, time_str: str) -> str:
    """e.g. Your booking at Nopa for June 1st 2024 at 18:00 is confirmed."""
    when = f"{day:%B} {_ordinal(day.day)} {day.year}"
    outcome = "is confirmed" if event_type == BookingEvent.CONFIRMED else "has been cancelled"
    return f"Your booking at {restaurant_name} for {when} at {time_str} {outcome}."


class NotificationDispatcher(Protocol):
    """Collaborator contract; implementations must not raise"""

    def dispatch(self, event_type: BookingEvent, user: User, booking: Booking, restaurant: Restaurant) -> bool:
        ...

    def record_notification(
            self,
            user_id: UUID,
            message: str,
            notification_type: NotificationType,
            booking_id: Optional[UUID]
    ) -> bool:
        ...


class CeleryNotificationDispatcher:
    """Publishes lifecycle events to the notifications queue"""

    # Bounded publish: never hold a request open waiting for the broker
    RETRY_POLICY = {
        "max_retries": 2,
        "interval_start": 0,
        "interval_step": 0.2,
        "interval_max": 0.5,
    }

    def dispatch(self, event_type: BookingEvent, user: User, booking: Booking, restaurant: Restaurant) -> bool:
        from app.tasks.notification_tasks import send_booking_email

        try:
            payload = BookingEmailPayload(
                event_type=event_type.value,
                booking_id=str(booking.id),
                email=user.email,
                first_name=user.first_name,
                restaurant_name=restaurant.name,
                date=booking.date.isoformat(),
                time=booking.time,
                party_size=booking.party_size,
            )
            send_booking_email.apply_async(
                kwargs=payload.model_dump(),
                retry=True,
                retry_policy=self.RETRY_POLICY,
            )
            logger.info(f"Queued {event_type.value} email for booking {booking.id}")
            return True
        except Exception as e:
            logger.error(f"Failed to queue {event_type.value} email for booking {booking.id}: {e}")
            return False

    def record_notification(
            self,
            user_id: UUID,
            message: str,
            notification_type: NotificationType,
            booking_id: Optional[UUID]
    ) -> bool:
        from app.tasks.notification_tasks import create_notification_record

        try:
            payload = NotificationRecordPayload(
                user_id=str(user_id),
                message=message,
                type=notification_type.value,
                booking_id=str(booking_id) if booking_id else None,
            )
            create_notification_record.apply_async(
                kwargs=payload.model_dump(),
                retry=True,
                retry_policy=self.RETRY_POLICY,
            )
            return True
        except Exception as e:
            logger.error(f"Failed to queue {notification_type.value} notification for user {user_id}: {e}")
            return False


_dispatcher: Optional[NotificationDispatcher] = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency returning the process-wide dispatcher"""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = CeleryNotificationDispatcher()
    return _dispatcher
