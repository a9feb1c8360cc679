"""Celery task definitions.

deliver_notification — push fan-out for one stored notification.
daily_diff_digest    — beat-scheduled: yesterday vs. the day before, stored and pushed.

Both run their async body in a fresh event loop, each with its own DB engine.
"""

import asyncio
import logging
from datetime import date

from app.config import settings
from app.db.session import worker_session
from app.models.notification import Notification, NotificationCategory
from app.services.notifications import (
    create_notification,
    enqueue_push,
    list_subscriptions,
    remove_subscriptions,
)
from app.services.push import build_payload, send_push
from app.services.reports import daily_diff
from app.services.summaries import describe_daily_diff
from app.services.windows import billing_tz, local_today
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


# ── Entry points ───────────────────────────────────────────────────────────────

@celery_app.task(bind=True, name="powerbill.deliver_notification", max_retries=0)
def deliver_notification(self, notification_id: int) -> dict:
    """Celery entry point — push one notification to every subscriber."""
    return asyncio.run(_deliver(notification_id))


@celery_app.task(bind=True, name="powerbill.daily_diff_digest", max_retries=0)
def daily_diff_digest(self) -> dict:
    """Celery entry point — daily usage comparison notification."""
    return asyncio.run(_daily_diff_digest())


# ── Async bodies ───────────────────────────────────────────────────────────────

async def _deliver(notification_id: int) -> dict:
    async with worker_session() as db:
        notification = await db.get(Notification, notification_id)
        if notification is None:
            logger.error("deliver_notification: notification %s not found", notification_id)
            return {"sent": 0, "failed": 0, "expired": 0}

        subscriptions = await list_subscriptions(db)
        # pywebpush blocks on HTTP; keep it off the event loop
        report = await asyncio.to_thread(
            send_push, subscriptions, build_payload(notification.title, notification.body)
        )

        removed = await remove_subscriptions(db, report.expired)
        if removed:
            logger.info("Removed %d expired subscription(s)", removed)

    return report.as_dict()


async def _daily_diff_digest(today: date | None = None) -> dict:
    tz = billing_tz()
    today = today or local_today(tz)

    async with worker_session() as db:
        diff = await daily_diff(db, today, settings.default_rate_per_kwh, tz)
        title, body = describe_daily_diff(diff)
        notification = await create_notification(
            db, NotificationCategory.daily_diff, title, body, payload=diff
        )

    enqueue_push(notification.id)
    logger.info("Daily diff digest for %s stored as notification %s", today, notification.id)
    return diff
