# app/config/celery_config.py
"""Celery configuration and task routing"""
from celery import Celery
from celery.schedules import crontab
from kombu import Queue

from app.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure Celery application"""

    celery_app = Celery(
        "booktable_service",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["app.tasks.notification_tasks", "app.tasks.maintenance_tasks"],
    )

    # Configure Celery
    celery_app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,

        # Task routing
        task_routes={
            "app.tasks.notification_tasks.*": {"queue": "notifications"},
            "app.tasks.maintenance_tasks.*": {"queue": "maintenance"},
        },

        # Queue definitions
        task_queues=(
            Queue("notifications", routing_key="notifications"),
            Queue("maintenance", routing_key="maintenance"),
        ),

        # Worker settings
        worker_max_tasks_per_child=1000,
        worker_prefetch_multiplier=1,
        task_acks_late=True,

        # Retry settings
        task_retry_max_retries=settings.MAX_RETRY_ATTEMPTS,
        task_retry_delay=60,  # 1 minute

        # Periodic tasks (run `celery -A app.worker beat`)
        beat_schedule={
            "reset-daily-booking-counters": {
                "task": "app.tasks.maintenance_tasks.reset_daily_booking_counters",
                "schedule": crontab(hour=0, minute=0),
            },
        },

        # Publishing must never hang a booking request
        broker_connection_timeout=settings.CELERY_PUBLISH_TIMEOUT_SECONDS,
        task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,

        broker_connection_retry_on_startup=True,
    )

    return celery_app


# Create the Celery app instance
celery_app = create_celery_app()
