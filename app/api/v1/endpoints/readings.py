"""Raw sample endpoints for charts and diagnostics."""

import logging
from datetime import tzinfo

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.dependencies import bad_request, get_billing_tz, require_date
from app.services.samples import fetch_samples, sample_to_dict
from app.services.windows import hour_range_window, parse_instant

logger = logging.getLogger(__name__)

router = APIRouter()

_MAX_ROWS = 50_000


@router.get(
    "/minute-power-range",
    summary="Raw samples for one day",
    description="Samples of one local day, optionally narrowed to startHour..endHour (inclusive).",
)
async def get_minute_power_range(
    date: str | None = None,
    start_hour: int | None = Query(None, alias="startHour", ge=0, le=23),
    end_hour: int | None = Query(None, alias="endHour", ge=0, le=23),
    limit: int = Query(10_000, ge=1, le=_MAX_ROWS),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    example = "/minute-power-range?date=2025-10-03&startHour=8&endHour=17"
    day = require_date(date, example)
    if start_hour is not None and end_hour is not None and start_hour > end_hour:
        raise bad_request("startHour must not be after endHour", example)

    start, end = hour_range_window(day, tz, start_hour, end_hour)
    samples = await fetch_samples(db, start, end, limit)
    return [sample_to_dict(s) for s in samples]


@router.get(
    "/diagnostics-range",
    summary="Raw samples between two instants",
    description="ISO-8601 start/end; values without an offset are read in the billing timezone.",
)
async def get_diagnostics_range(
    start: str | None = None,
    end: str | None = None,
    limit: int = Query(10_000, ge=1, le=_MAX_ROWS),
    tz: tzinfo = Depends(get_billing_tz),
    db: AsyncSession = Depends(get_db),
):
    example = "/diagnostics-range?start=2025-10-02T17:00:00Z&end=2025-10-02T17:05:00Z"
    if not start or not end:
        raise bad_request("Missing query params", example)
    try:
        start_ts, end_ts = parse_instant(start, tz), parse_instant(end, tz)
    except ValueError as exc:
        raise bad_request(f"Invalid timestamp: {exc}", example) from exc
    if start_ts > end_ts:
        raise bad_request("start must not be after end", example)

    samples = await fetch_samples(db, start_ts, end_ts, limit)
    logger.debug("Diagnostics range %s → %s: %d samples", start_ts, end_ts, len(samples))
    return [sample_to_dict(s) for s in samples]
