# Import all ORM models here so Alembic's env.py picks up their metadata automatically.
from app.models.notification import Notification, NotificationCategory, PushSubscription
from app.models.sample import PowerSample

__all__ = ["PowerSample", "Notification", "NotificationCategory", "PushSubscription"]
