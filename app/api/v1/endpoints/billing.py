"""Energy and billing endpoints.

Every figure is recomputed from raw samples on each request; nothing is cached.
Days, hours and months are cut in the configured billing timezone.
A window without samples answers 404 with the full response shape zero-filled.
"""

import logging
from datetime import tzinfo

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.dependencies import get_billing_tz, get_rate_per_kwh, require_date, require_month
from app.services import reports
from app.services.windows import local_today

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(error: str, body: dict) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": error, **body})


# ── Daily bill ─────────────────────────────────────────────────────────────────

@router.get(
    "/daily-bill",
    summary="Daily energy and bill",
    description="Energy, bill and power statistics for one day (defaults to today).",
)
async def get_daily_bill(
    date: str | None = None,
    rate_per_kwh: float = Depends(get_rate_per_kwh),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    day = require_date(date, "2025-09-30") if date else local_today(tz)
    summary = await reports.daily_bill(db, day, rate_per_kwh, tz)

    if summary["samples"] == 0:
        return _not_found(f"No data found for {summary['date']}", summary)
    return summary


@router.get("/daily-bill/{date}", summary="Daily energy and bill (path form)")
async def get_daily_bill_by_path(
    date: str,
    rate_per_kwh: float = Depends(get_rate_per_kwh),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    return await get_daily_bill(date, rate_per_kwh, tz, db)


# ── Hourly ─────────────────────────────────────────────────────────────────────

@router.get(
    "/hourly-bill/{date}",
    summary="Hourly energy and bill",
    description="24 hourly buckets; intervals crossing an hour are split proportionally.",
)
async def get_hourly_bill(
    date: str,
    rate_per_kwh: float = Depends(get_rate_per_kwh),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    day = require_date(date, "/hourly-bill/2025-10-03")
    return await reports.hourly_bill(db, day, rate_per_kwh, tz)


@router.get("/hourly-summary", summary="Hourly energy and bill (query form)")
async def get_hourly_summary(
    date: str | None = None,
    rate_per_kwh: float = Depends(get_rate_per_kwh),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    day = require_date(date, "/hourly-summary?date=2025-10-03")
    return await reports.hourly_bill(db, day, rate_per_kwh, tz)


# ── Day over day ───────────────────────────────────────────────────────────────

@router.get(
    "/daily-diff",
    summary="Yesterday vs. the day before",
    description="Energy and bill of the last two complete days and their difference.",
)
async def get_daily_diff(
    rate_per_kwh: float = Depends(get_rate_per_kwh),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    return await reports.daily_diff(db, local_today(tz), rate_per_kwh, tz)


# ── Solar sizing ───────────────────────────────────────────────────────────────

@router.get(
    "/solar-size",
    summary="Solar capacity estimate",
    description=(
        "Splits a day's energy into daytime and night-time, estimates the PV "
        "capacity needed to cover daytime use, and projects savings."
    ),
)
async def get_solar_size(
    date: str | None = None,
    rate_per_kwh: float = Depends(get_rate_per_kwh),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    day = require_date(date, "/solar-size?date=2025-10-07")
    estimate = await reports.solar_size(db, day, rate_per_kwh, tz)

    if estimate["samples"] == 0:
        return _not_found(f"No data for {estimate['date']}", estimate)
    return estimate


# ── Multi-day ──────────────────────────────────────────────────────────────────

@router.get(
    "/calendar",
    summary="Calendar events",
    description="Two events per day with data: energy in units and the bill.",
)
async def get_calendar(
    rate_per_kwh: float = Depends(get_rate_per_kwh),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    events = await reports.calendar(db, rate_per_kwh, tz)
    if not events:
        return _not_found("No data found", {"events": []})
    return events


@router.get("/monthly-bill", summary="Monthly energy and bill, per day")
async def get_monthly_bill(
    month: str | None = None,
    rate_per_kwh: float = Depends(get_rate_per_kwh),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    first_day = require_month(month, "/monthly-bill?month=2025-10")
    summary = await reports.monthly_bill(db, first_day, rate_per_kwh, tz)

    if summary["samples"] == 0:
        return _not_found(f"No data found for {summary['month']}", summary)
    return summary
