# ===== app/tasks/maintenance_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.models.restaurant import Restaurant

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=300)
def reset_daily_booking_counters(self):
    """
    Zero every restaurant's times_booked_today.

    Scheduled by Celery beat at 00:00 UTC, the same day boundary bookings use.
    """
    db = SessionLocal()

    try:
        reset = db.query(Restaurant).filter(Restaurant.times_booked_today != 0).update(
            {Restaurant.times_booked_today: 0},
            synchronize_session=False,
        )
        db.commit()

        logger.info(f"Reset daily booking counter on {reset} restaurant(s)")
        return {"status": "success", "restaurants_reset": reset}

    except Exception as exc:
        db.rollback()
        logger.error(f"Failed to reset daily booking counters: {exc}")
        raise self.retry(exc=exc)

    finally:
        db.close()
