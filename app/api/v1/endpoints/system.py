import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/status",
    summary="Service status",
    description="Returns service version, database connection status and billing configuration.",
)
async def get_status(db: AsyncSession = Depends(get_db)):
    # ── DB liveness ────────────────────────────────────────────────────────────
    db_status = "ok"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("DB health check failed: %s", exc)
        db_status = "error"

    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "db": db_status,
        "push": "configured" if settings.vapid_private_key else "not_configured",
        "config": {
            "billing_timezone": settings.billing_timezone,
            "default_rate_per_kwh": settings.default_rate_per_kwh,
            "peak_threshold_kw": settings.peak_threshold_kw,
            "peak_poll_interval_seconds": settings.peak_poll_interval_seconds,
            "solar_sun_hours": settings.solar_sun_hours,
        },
    }


@router.get(
    "/peak",
    summary="Today's running peak",
    description="Read-only view of the peak monitor state (null date until the first poll).",
)
async def get_peak(request: Request):
    state = getattr(request.app.state, "peak_state", None)
    return {
        "monitor_running": state is not None,
        "date": state.date.isoformat() if state and state.date else None,
        "max_power_kw": state.max_power if state else 0.0,
        "threshold_kw": settings.peak_threshold_kw,
        "threshold_alert_sent": state.threshold_alert_sent if state else False,
    }
