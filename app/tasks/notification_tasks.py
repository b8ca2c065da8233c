# ===== app/tasks/notification_tasks.py =====
from datetime import date
from uuid import UUID
import logging

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.config.settings import settings
from app.models.notification import Notification
from app.schemas.task_payloads import BookingEmailPayload, NotificationRecordPayload
from app.services.email.email_service import EmailService

logger = logging.getLogger(__name__)


def _backoff(retries: int) -> int:
    # 1min, 2min, 4min
    return 60 * (2 ** retries)


@celery_app.task(bind=True, max_retries=settings.MAX_RETRY_ATTEMPTS)
def send_booking_email(self, **payload):
    """
    Send the confirmation or cancellation email for a booking.

    Retries with exponential backoff; once retries are exhausted the failure
    is logged and the task finishes without raising.
    """
    data = BookingEmailPayload(**payload)

    try:
        logger.info(f"Sending {data.event_type} email for booking {data.booking_id} to {data.email}")

        send = (
            EmailService.send_booking_confirmation_email
            if data.event_type == "BookingConfirmed"
            else EmailService.send_booking_cancellation_email
        )
        send(
            email=data.email,
            restaurant_name=data.restaurant_name,
            day=date.fromisoformat(data.date),
            time_str=data.time,
            party_size=data.party_size,
            first_name=data.first_name,
        )

        return {"status": "success", "booking_id": data.booking_id}

    except Exception as exc:
        if self.request.retries >= self.max_retries:
            logger.error(
                f"Giving up on {data.event_type} email for booking {data.booking_id} "
                f"after {self.request.retries} retries: {exc}"
            )
            return {"status": "failed", "booking_id": data.booking_id, "error": str(exc)}

        logger.warning(f"Failed to send {data.event_type} email for booking {data.booking_id}: {exc}")
        raise self.retry(exc=exc, countdown=_backoff(self.request.retries))


@celery_app.task(bind=True, max_retries=settings.MAX_RETRY_ATTEMPTS)
def create_notification_record(self, **payload):
    """Persist an in-app notification for a user"""
    data = NotificationRecordPayload(**payload)
    db = SessionLocal()

    try:
        notification = Notification(
            user_id=UUID(data.user_id),
            message=data.message,
            type=data.type,
            booking_id=UUID(data.booking_id) if data.booking_id else None,
        )
        db.add(notification)
        db.commit()

        logger.info(f"Created {data.type} notification for user {data.user_id}")
        return {"status": "success", "notification_id": str(notification.id)}

    except Exception as exc:
        db.rollback()
        if self.request.retries >= self.max_retries:
            logger.error(
                f"Giving up on {data.type} notification for user {data.user_id} "
                f"after {self.request.retries} retries: {exc}"
            )
            return {"status": "failed", "error": str(exc)}

        logger.warning(f"Failed to create {data.type} notification for user {data.user_id}: {exc}")
        raise self.retry(exc=exc, countdown=_backoff(self.request.retries))

    finally:
        db.close()
