"""Notification storage, subscription storage and push hand-off.

Creating a notification stores the row first; the push fan-out then runs in a
Celery worker (``powerbill.deliver_notification``). A broker outage is logged
and never fails the caller: the row is already saved and shows up in the
notification feed.
"""

import logging
import math

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification, NotificationCategory, PushSubscription
from app.services.peak_monitor import PeakEvent
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)

DELIVER_TASK = "powerbill.deliver_notification"


# ── Creation & dispatch ────────────────────────────────────────────────────────

async def create_notification(
    db: AsyncSession,
    category: NotificationCategory,
    title: str,
    body: str,
    power: float | None = None,
    payload: dict | None = None,
) -> Notification:
    notification = Notification(
        category=category, title=title, body=body, power=power, payload=payload, read=False
    )
    db.add(notification)
    await db.commit()
    await db.refresh(notification)
    logger.info("Saved %s notification %s", category.value, notification.id)
    return notification


def enqueue_push(notification_id: int) -> bool:
    """Queue the push fan-out. Returns False when the broker is unreachable."""
    try:
        celery_app.send_task(DELIVER_TASK, args=[notification_id])
    except Exception as exc:
        logger.warning("Could not queue push for notification %s: %s", notification_id, exc)
        return False
    return True


async def notify(
    db: AsyncSession,
    category: NotificationCategory,
    title: str,
    body: str,
    power: float | None = None,
    payload: dict | None = None,
) -> Notification:
    notification = await create_notification(db, category, title, body, power, payload)
    enqueue_push(notification.id)
    return notification


async def dispatch_events(db: AsyncSession, events: list[PeakEvent]) -> None:
    """Store and push each monitor event.

    Events are independent: a failure on one is logged, the session is rolled
    back so it stays usable, and the rest of the batch still goes out.
    """
    for event in events:
        try:
            await notify(
                db,
                event.category,
                event.title,
                event.body,
                power=event.power,
                payload={"sample_ts": event.ts.isoformat(), "threshold_kw": event.threshold_kw},
            )
        except Exception:
            logger.exception(
                "Failed to store %s notification (%.2f kW)", event.category.value, event.power
            )
            await db.rollback()


# ── Queries ────────────────────────────────────────────────────────────────────

def _filter(stmt, category: NotificationCategory | None, unread_only: bool = False):
    if category is not None:
        stmt = stmt.where(Notification.category == category)
    if unread_only:
        stmt = stmt.where(Notification.read.is_(False))
    return stmt


async def count_notifications(
    db: AsyncSession, category: NotificationCategory | None = None, unread_only: bool = False
) -> int:
    result = await db.execute(
        _filter(select(func.count()).select_from(Notification), category, unread_only)
    )
    return result.scalar_one()


async def list_notifications(
    db: AsyncSession,
    category: NotificationCategory | None,
    limit: int,
    page: int,
    unread_only: bool,
) -> dict:
    """One page of notifications, newest first, with pagination and unread count."""
    result = await db.execute(
        _filter(select(Notification), category, unread_only)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    )
    rows = result.scalars().all()
    total = await count_notifications(db, category, unread_only)
    unread = await count_notifications(db, category, unread_only=True)

    return {
        "data": [n.to_dict() for n in rows],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 0,
        },
        "unreadCount": unread,
    }


async def notification_stats(db: AsyncSession) -> dict:
    by_type: dict[str, dict] = {}
    for category in NotificationCategory:
        total = await count_notifications(db, category)
        unread = await count_notifications(db, category, unread_only=True)
        latest = await db.execute(
            select(Notification)
            .where(Notification.category == category)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(1)
        )
        latest_row = latest.scalar_one_or_none()
        by_type[category.value] = {
            "total": total,
            "unread": unread,
            "read": total - unread,
            "latest": latest_row.to_dict() if latest_row else None,
        }

    total = sum(entry["total"] for entry in by_type.values())
    unread = sum(entry["unread"] for entry in by_type.values())
    return {"total": total, "unread": unread, "read": total - unread, "byType": by_type}


# ── Mutations ──────────────────────────────────────────────────────────────────

async def mark_read(db: AsyncSession, category: NotificationCategory, ids: list[int]) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.category == category, Notification.id.in_(ids))
        .values(read=True)
    )
    await db.commit()
    return result.rowcount


async def mark_all_read(db: AsyncSession) -> dict[str, int]:
    breakdown: dict[str, int] = {}
    for category in NotificationCategory:
        result = await db.execute(
            update(Notification)
            .where(Notification.category == category, Notification.read.is_(False))
            .values(read=True)
        )
        breakdown[category.value] = result.rowcount
    await db.commit()
    return breakdown


async def delete_notification(
    db: AsyncSession, category: NotificationCategory, notification_id: int
) -> bool:
    result = await db.execute(
        delete(Notification).where(
            Notification.category == category, Notification.id == notification_id
        )
    )
    await db.commit()
    return result.rowcount > 0


async def delete_notifications(
    db: AsyncSession, category: NotificationCategory | None = None
) -> dict[str, int]:
    """Delete one category, or every category when *category* is None."""
    categories = [category] if category is not None else list(NotificationCategory)
    breakdown = {c.value: 0 for c in NotificationCategory}
    for c in categories:
        result = await db.execute(delete(Notification).where(Notification.category == c))
        breakdown[c.value] = result.rowcount
    await db.commit()
    return breakdown


# ── Push subscriptions ─────────────────────────────────────────────────────────

async def add_subscription(db: AsyncSession, endpoint: str, p256dh: str, auth: str) -> bool:
    """Store a subscription. Returns False when the endpoint is already known."""
    existing = await db.execute(
        select(PushSubscription).where(PushSubscription.endpoint == endpoint)
    )
    if existing.scalar_one_or_none() is not None:
        return False

    db.add(PushSubscription(endpoint=endpoint, p256dh=p256dh, auth=auth))
    await db.commit()
    logger.info("Push subscription added: %s", endpoint)
    return True


async def remove_subscriptions(db: AsyncSession, endpoints: list[str]) -> int:
    if not endpoints:
        return 0
    result = await db.execute(
        delete(PushSubscription).where(PushSubscription.endpoint.in_(endpoints))
    )
    await db.commit()
    return result.rowcount


async def list_subscriptions(db: AsyncSession) -> list[PushSubscription]:
    result = await db.execute(select(PushSubscription).order_by(PushSubscription.id))
    return list(result.scalars().all())
