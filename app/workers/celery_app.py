from celery import Celery
from celery.schedules import crontab

from app.config import settings

celery_app = Celery(
    "powerbill",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.workers.tasks"],
)

celery_app.conf.update(
    # Serialisation
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    # Beat schedules are read in the billing timezone so the digest lands at local morning
    timezone=settings.billing_timezone,
    enable_utc=True,
    # Reliability
    task_acks_late=True,       # Ack only after the fan-out finishes
    worker_prefetch_multiplier=1,
    # Push results are only interesting for a short while
    result_expires=3600,
    beat_schedule={
        "daily-diff-digest": {
            "task": "powerbill.daily_diff_digest",
            "schedule": crontab(hour=settings.daily_diff_digest_hour, minute=0),
        },
    },
)
