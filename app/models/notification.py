import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class NotificationCategory(str, enum.Enum):
    peak = "peak"
    threshold = "threshold"
    daily_diff = "daily_diff"
    test = "test"


class Notification(Base):
    """A stored notification; the push fan-out is a separate step."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[NotificationCategory] = mapped_column(
        Enum(NotificationCategory, name="notificationcategory"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    power: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Category-specific figures, e.g. the yesterday / day-before block of a daily diff
    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.category.value,
            "title": self.title,
            "body": self.body,
            "power": self.power,
            "payload": self.payload,
            "read": self.read,
            "timestamp": self.created_at.isoformat() if self.created_at else None,
        }


class PushSubscription(Base):
    """Browser Web Push subscription, unique per endpoint URL."""

    __tablename__ = "push_subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    endpoint: Mapped[str] = mapped_column(String(1024), nullable=False, unique=True)
    p256dh: Mapped[str] = mapped_column(String(255), nullable=False)
    auth: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def subscription_info(self) -> dict:
        """The dict shape pywebpush expects."""
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}
