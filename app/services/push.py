"""Web Push fan-out via pywebpush.

Each subscription is delivered independently: one failing endpoint never stops
the others. Endpoints answering 404 / 410 are reported as expired so the caller
can prune them.
"""

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from pywebpush import WebPushException, webpush

from app.config import settings
from app.models.notification import PushSubscription

logger = logging.getLogger(__name__)

_EXPIRED_STATUSES = {404, 410}


@dataclass
class PushReport:
    sent: int = 0
    failed: int = 0
    expired: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"sent": self.sent, "failed": self.failed, "expired": len(self.expired)}


def build_payload(title: str, body: str, url: str = "/") -> str:
    return json.dumps({"title": title, "body": body, "url": url})


def send_push(
    subscriptions: Sequence[PushSubscription],
    payload: str,
    sender: Callable[..., object] = webpush,
) -> PushReport:
    """Deliver *payload* to every subscription and report the outcome."""
    report = PushReport()

    if not subscriptions:
        logger.info("No push subscriptions to send to")
        return report

    if not settings.vapid_private_key:
        logger.warning("VAPID keys not configured — skipping push to %d subscriber(s)", len(subscriptions))
        return report

    for sub in subscriptions:
        try:
            sender(
                subscription_info=sub.subscription_info(),
                data=payload,
                vapid_private_key=settings.vapid_private_key,
                vapid_claims={"sub": settings.vapid_subject},
            )
            report.sent += 1
            logger.debug("Sent push to %s", sub.endpoint)
        except WebPushException as exc:
            status = exc.response.status_code if exc.response is not None else None
            if status in _EXPIRED_STATUSES:
                report.expired.append(sub.endpoint)
                logger.info("Subscription expired (%s): %s", status, sub.endpoint)
            else:
                report.failed += 1
                logger.warning("Push to %s failed (%s): %s", sub.endpoint, status, exc)
        except Exception as exc:
            report.failed += 1
            logger.warning("Push to %s failed: %s", sub.endpoint, exc)

    logger.info(
        "Push fan-out: %d sent, %d failed, %d expired",
        report.sent, report.failed, len(report.expired),
    )
    return report
