"""Read-only queries over the power_samples table."""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.sample import PowerSample
from app.services.integrator import Reading

logger = logging.getLogger(__name__)


async def fetch_readings(
    db: AsyncSession,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Reading]:
    """(ts, power) pairs in ``[start, end)`` ordered by ts — the integrator's input."""
    stmt = select(PowerSample.ts, PowerSample.power).order_by(PowerSample.ts)
    if start is not None:
        stmt = stmt.where(PowerSample.ts >= start)
    if end is not None:
        stmt = stmt.where(PowerSample.ts < end)

    result = await db.execute(stmt)
    readings = [(ts, power or 0.0) for ts, power in result.all()]
    logger.debug("Fetched %d readings in [%s, %s)", len(readings), start, end)
    return readings


async def fetch_samples(
    db: AsyncSession,
    start: datetime,
    end: datetime,
    limit: int,
) -> list[PowerSample]:
    """Full sample rows in ``[start, end)`` for diagnostics, capped at *limit*."""
    result = await db.execute(
        select(PowerSample)
        .where(PowerSample.ts >= start, PowerSample.ts < end)
        .order_by(PowerSample.ts)
        .limit(limit)
    )
    return list(result.scalars().all())


async def fetch_latest(db: AsyncSession) -> PowerSample | None:
    result = await db.execute(
        select(PowerSample).order_by(PowerSample.ts.desc()).limit(1)
    )
    return result.scalar_one_or_none()


def sample_to_dict(sample: PowerSample) -> dict:
    return {
        "id": sample.id,
        "timestamp": sample.ts.isoformat(),
        "power": sample.power,
        "voltage": sample.voltage,
        "current": sample.current,
        "active_power_phase_a": sample.active_power_phase_a,
        "active_power_phase_b": sample.active_power_phase_b,
        "active_power_phase_c": sample.active_power_phase_c,
        "voltage1": sample.voltage1,
        "voltage2": sample.voltage2,
        "voltage3": sample.voltage3,
        "voltage_ln": sample.voltage_ln,
        "voltage_ll": sample.voltage_ll,
    }
