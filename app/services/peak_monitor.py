"""Daily peak / threshold monitor.

``evaluate_sample`` is the pure state transition: it takes the injected
``DailyPeakState`` and the newest reading and returns the events to emit.
``run_peak_monitor`` is the background loop that feeds it every few seconds and
hands events to the dispatcher. Only the loop mutates the state.
"""

import asyncio
import datetime as dt
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.notification import NotificationCategory
from app.services.samples import fetch_latest

logger = logging.getLogger(__name__)


@dataclass
class DailyPeakState:
    date: dt.date | None = None
    max_power: float = 0.0
    threshold_alert_sent: bool = False


@dataclass(frozen=True)
class PeakEvent:
    category: NotificationCategory
    power: float
    ts: datetime
    threshold_kw: float | None = None

    @property
    def title(self) -> str:
        if self.category is NotificationCategory.threshold:
            return "🚨 Power threshold exceeded"
        return "⚡ New Daily Peak!"

    @property
    def body(self) -> str:
        if self.category is NotificationCategory.threshold:
            return (
                f"Power reached {self.power:.2f} kW "
                f"(threshold {self.threshold_kw:.2f} kW)"
            )
        return f"Current peak power is {self.power:.2f} kW"


Dispatcher = Callable[[AsyncSession, list[PeakEvent]], Awaitable[None]]


def evaluate_sample(
    state: DailyPeakState,
    ts: datetime,
    power: float | None,
    threshold_kw: float,
    tz: tzinfo,
) -> list[PeakEvent]:
    """Advance *state* with one reading and return the events it triggers.

    A reading from a new local calendar date resets the day first. A new peak
    fires only when power is strictly above the running maximum; the threshold
    alert fires at most once per day.
    """
    power = power or 0.0
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    sample_date = ts.astimezone(tz).date()

    if state.date != sample_date:
        logger.info("Reset daily peak for %s", sample_date)
        state.date = sample_date
        state.max_power = 0.0
        state.threshold_alert_sent = False

    events: list[PeakEvent] = []

    if power > state.max_power:
        state.max_power = power
        logger.info("New peak %.2f kW at %s", power, ts.isoformat())
        events.append(PeakEvent(NotificationCategory.peak, power, ts))

    if power >= threshold_kw and not state.threshold_alert_sent:
        state.threshold_alert_sent = True
        logger.info("Threshold %.2f kW crossed: %.2f kW", threshold_kw, power)
        events.append(
            PeakEvent(NotificationCategory.threshold, power, ts, threshold_kw=threshold_kw)
        )

    return events


async def poll_once(
    state: DailyPeakState,
    session_factory: async_sessionmaker,
    dispatch: Dispatcher,
    threshold_kw: float,
    tz: tzinfo,
) -> list[PeakEvent]:
    """One tick: read the newest sample, evaluate, dispatch. Never raises."""
    try:
        async with session_factory() as db:
            latest = await fetch_latest(db)
            if latest is None:
                return []
            events = evaluate_sample(state, latest.ts, latest.power, threshold_kw, tz)
            if events:
                await dispatch(db, events)
            return events
    except Exception:
        logger.exception("Peak poll failed; retrying on the next tick")
        return []


async def run_peak_monitor(
    state: DailyPeakState,
    session_factory: async_sessionmaker,
    dispatch: Dispatcher,
    interval_seconds: float,
    threshold_kw: float,
    tz: tzinfo,
) -> None:
    """Poll forever at a fixed cadence until cancelled."""
    logger.info(
        "Peak monitor started (every %.0fs, threshold %.2f kW)", interval_seconds, threshold_kw
    )
    try:
        while True:
            await poll_once(state, session_factory, dispatch, threshold_kw, tz)
            await asyncio.sleep(interval_seconds)
    except asyncio.CancelledError:
        logger.info("Peak monitor stopped")
        raise
