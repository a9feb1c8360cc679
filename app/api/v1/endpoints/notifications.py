"""Push subscriptions and the notification feed.

Notifications are scoped by category: peak, threshold, daily_diff, test.
List endpoints also accept ``all``.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.dependencies import bad_request
from app.models.notification import NotificationCategory
from app.services import notifications as notification_service

logger = logging.getLogger(__name__)

router = APIRouter()

_ALL = "all"


class SubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class SubscriptionIn(BaseModel):
    endpoint: str
    keys: SubscriptionKeys


class UnsubscribeIn(BaseModel):
    endpoint: str


class MarkReadIn(BaseModel):
    type: NotificationCategory
    ids: list[int]


def _category_or_400(value: str | None) -> NotificationCategory | None:
    """None means every category."""
    if value is None or value == _ALL:
        return None
    try:
        return NotificationCategory(value)
    except ValueError as exc:
        raise bad_request(
            "Invalid type", f"one of {[c.value for c in NotificationCategory] + [_ALL]}"
        ) from exc


# ── Subscriptions ──────────────────────────────────────────────────────────────

@router.post("/subscribe", status_code=status.HTTP_201_CREATED, summary="Register a push subscription")
async def subscribe(payload: SubscriptionIn, db: AsyncSession = Depends(get_db)):
    created = await notification_service.add_subscription(
        db, payload.endpoint, payload.keys.p256dh, payload.keys.auth
    )
    message = "Subscribed successfully" if created else "Already subscribed"
    return {"message": message}


@router.post("/unsubscribe", summary="Remove a push subscription")
async def unsubscribe(payload: UnsubscribeIn, db: AsyncSession = Depends(get_db)):
    removed = await notification_service.remove_subscriptions(db, [payload.endpoint])
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    return {"message": "Unsubscribed successfully"}


@router.post("/test-push", summary="Send a test notification")
async def test_push(db: AsyncSession = Depends(get_db)):
    notification = await notification_service.notify(
        db, NotificationCategory.test, "🔔 Test Push", "Test notification is working!"
    )
    return {"success": True, "notification": notification.to_dict()}


# ── Feed ───────────────────────────────────────────────────────────────────────
# Fixed paths are registered before /notifications/{category} so they win the match.

@router.get("/notifications/recent", summary="Latest notifications of every type")
async def recent_notifications(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    page = await notification_service.list_notifications(
        db, None, limit=limit, page=1, unread_only=False
    )
    breakdown = {
        c.value: await notification_service.count_notifications(db, c, unread_only=True)
        for c in NotificationCategory
    }
    return {
        "success": True,
        "data": page["data"],
        "unreadCount": page["unreadCount"],
        "breakdown": breakdown,
    }


@router.get("/notifications/stats", summary="Notification counts by type")
async def stats(db: AsyncSession = Depends(get_db)):
    return {"success": True, "stats": await notification_service.notification_stats(db)}


@router.get("/notifications/{category}", summary="Paged notification feed")
async def list_notifications(
    category: str,
    limit: int = Query(50, ge=1, le=500),
    page: int = Query(1, ge=1),
    unread_only: bool = Query(False, alias="unreadOnly"),
    db: AsyncSession = Depends(get_db),
):
    scope = _category_or_400(category)
    result = await notification_service.list_notifications(db, scope, limit, page, unread_only)
    return {"success": True, "type": category, **result}


@router.patch("/notifications/mark-read", summary="Mark notifications as read")
async def mark_read(payload: MarkReadIn, db: AsyncSession = Depends(get_db)):
    modified = await notification_service.mark_read(db, payload.type, payload.ids)
    return {
        "success": True,
        "message": f"Marked {modified} {payload.type.value} notifications as read",
        "modifiedCount": modified,
    }


@router.patch("/notifications/mark-all-read", summary="Mark every notification as read")
async def mark_all_read(db: AsyncSession = Depends(get_db)):
    breakdown = await notification_service.mark_all_read(db)
    total = sum(breakdown.values())
    return {
        "success": True,
        "message": f"Marked {total} notifications as read",
        "breakdown": breakdown,
        "totalModified": total,
    }


@router.delete("/notifications/{category}/{notification_id}", summary="Delete one notification")
async def delete_notification(
    category: NotificationCategory,
    notification_id: int,
    db: AsyncSession = Depends(get_db),
):
    deleted = await notification_service.delete_notification(db, category, notification_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return {"success": True, "message": f"{category.value} notification deleted successfully"}


@router.delete("/notifications", summary="Delete notifications of one type, or all")
async def delete_notifications(
    category: str | None = Query(None, alias="type"),
    db: AsyncSession = Depends(get_db),
):
    scope = _category_or_400(category)
    breakdown = await notification_service.delete_notifications(db, scope)
    total = sum(breakdown.values())
    return {
        "success": True,
        "message": f"Deleted {total} notifications",
        "breakdown": breakdown,
        "totalDeleted": total,
    }
