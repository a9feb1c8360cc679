"""Fetch-then-summarize compositions shared by the HTTP layer and the workers."""

import logging
from datetime import date, timedelta, tzinfo

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.services.integrator import integrate_daily
from app.services.samples import fetch_readings
from app.services.summaries import (
    calendar_events,
    estimate_solar_size,
    summarize_daily_diff,
    summarize_day,
    summarize_hours,
    summarize_month,
)
from app.services.windows import day_window, month_window

logger = logging.getLogger(__name__)


async def daily_bill(db: AsyncSession, day: date, rate_per_kwh: float, tz: tzinfo) -> dict:
    readings = await fetch_readings(db, *day_window(day, tz))
    return summarize_day(day, readings, rate_per_kwh)


async def hourly_bill(db: AsyncSession, day: date, rate_per_kwh: float, tz: tzinfo) -> dict:
    readings = await fetch_readings(db, *day_window(day, tz))
    return summarize_hours(day, readings, rate_per_kwh, tz)


async def daily_diff(db: AsyncSession, today: date, rate_per_kwh: float, tz: tzinfo) -> dict:
    """Compare the two complete days before *today*."""
    yesterday = today - timedelta(days=1)
    day_before = today - timedelta(days=2)

    yesterday_readings = await fetch_readings(db, *day_window(yesterday, tz))
    day_before_readings = await fetch_readings(db, *day_window(day_before, tz))

    return summarize_daily_diff(
        yesterday, yesterday_readings, day_before, day_before_readings, rate_per_kwh
    )


async def solar_size(db: AsyncSession, day: date, rate_per_kwh: float, tz: tzinfo) -> dict:
    readings = await fetch_readings(db, *day_window(day, tz))
    return estimate_solar_size(
        day,
        readings,
        rate_per_kwh,
        tz,
        sun_hours=settings.solar_sun_hours,
        daytime_start_hour=settings.daytime_start_hour,
        daytime_end_hour=settings.daytime_end_hour,
    )


async def calendar(db: AsyncSession, rate_per_kwh: float, tz: tzinfo) -> list[dict]:
    readings = await fetch_readings(db)
    daily = integrate_daily(readings, tz)
    logger.info("Calendar built from %d readings over %d days", len(readings), len(daily))
    return calendar_events(daily, rate_per_kwh, settings.currency_symbol)


async def monthly_bill(
    db: AsyncSession, first_day: date, rate_per_kwh: float, tz: tzinfo
) -> dict:
    readings = await fetch_readings(db, *month_window(first_day, tz))
    return summarize_month(first_day, integrate_daily(readings, tz), rate_per_kwh)
