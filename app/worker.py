"""
Celery worker entry point

    celery -A app.worker worker -Q notifications,maintenance
    celery -A app.worker beat

Sends booking emails, persists in-app notifications and runs the nightly
reset of the per-restaurant daily booking counter.
"""
import logging
from celery.signals import worker_ready, worker_shutdown

from app.config.celery_config import celery_app
from app.utils.my_logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

WORKER_QUEUES = ("notifications", "maintenance")


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    booktable_tasks = sorted(name for name in celery_app.tasks.keys() if name.startswith("app.tasks."))
    logger.info(f"🚀 Celery worker ready on queues {', '.join(WORKER_QUEUES)}")
    logger.info(f"📋 Booking tasks: {booktable_tasks}")
    for name, entry in celery_app.conf.beat_schedule.items():
        logger.info(f"⏰ Scheduled {name}: {entry['task']} ({entry['schedule']})")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    logger.info("🛑 Celery worker shutting down...")


if __name__ == "__main__":
    celery_app.start([
        'worker',
        '--loglevel=info',
        f'--queues={",".join(WORKER_QUEUES)}',
        '--concurrency=4',
        '--max-tasks-per-child=1000'
    ])
