"""Trapezoidal energy integration over irregularly sampled power readings.

A reading is a ``(timestamp, power_kw)`` pair. Readings must arrive ordered by
timestamp (the samples query always sorts by ts). The energy of the interval
between two consecutive readings is the mean of their powers times the elapsed
hours; a gap of any length is integrated the same way.

Nothing here rounds. Rounding belongs to the response layer (see billing.round2).
"""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

Reading = tuple[datetime, float]

_HOUR = timedelta(hours=1)
_SECONDS_PER_HOUR = 3600.0


@dataclass
class HourlyEnergy:
    """Energy and peak power per local hour-of-day (index 0–23)."""

    energy_kwh: list[float] = field(default_factory=lambda: [0.0] * 24)
    peak_kw: list[float] = field(default_factory=lambda: [0.0] * 24)

    @property
    def total_kwh(self) -> float:
        return sum(self.energy_kwh)


def _as_utc(ts: datetime) -> datetime:
    # Naive timestamps are treated as UTC instants
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _pairs(readings: Sequence[Reading]) -> Iterator[tuple[Reading, Reading]]:
    return zip(readings, readings[1:])


def _hours(delta: timedelta) -> float:
    return delta.total_seconds() / _SECONDS_PER_HOUR


def interval_energy(prev: Reading, curr: Reading) -> float:
    """kWh between two consecutive readings."""
    (t0, p0), (t1, p1) = prev, curr
    return (p0 + p1) / 2 * _hours(_as_utc(t1) - _as_utc(t0))


def integrate_energy(readings: Sequence[Reading]) -> float:
    """Total kWh across *readings*. Fewer than two readings integrate to 0."""
    return sum((interval_energy(prev, curr) for prev, curr in _pairs(readings)), 0.0)


def integrate_hourly(readings: Sequence[Reading], tz: tzinfo) -> HourlyEnergy:
    """Split every interval at local hour boundaries and bucket it by hour-of-day.

    Each sub-interval is attributed to the hour in *tz* that contains its start,
    so the 24 buckets always sum to ``integrate_energy(readings)``. Boundaries
    are computed from the local minute/second offset, which keeps half-hour
    offset zones correct.

    A bucket's peak is the largest endpoint power of any interval touching it.
    """
    result = HourlyEnergy()

    for (t0, p0), (t1, p1) in _pairs(readings):
        avg_kw = (p0 + p1) / 2
        peak_kw = max(p0, p1)
        start, end = _as_utc(t0), _as_utc(t1)

        while start < end:
            local = start.astimezone(tz)
            into_hour = timedelta(
                minutes=local.minute, seconds=local.second, microseconds=local.microsecond
            )
            stop = min(start + _HOUR - into_hour, end)

            result.energy_kwh[local.hour] += avg_kw * _hours(stop - start)
            result.peak_kw[local.hour] = max(result.peak_kw[local.hour], peak_kw)
            start = stop

    return result


def longest_gap(readings: Sequence[Reading]) -> timedelta:
    """Widest spacing between consecutive readings (zero for < 2 readings)."""
    return max(
        (_as_utc(t1) - _as_utc(t0) for (t0, _), (t1, _) in _pairs(readings)),
        default=timedelta(0),
    )


def integrate_daily(readings: Sequence[Reading], tz: tzinfo) -> pd.DataFrame:
    """Integrate each local calendar day on its own.

    Readings are grouped by their local date in *tz* and each group is integrated
    only over its own readings, exactly as a single-day request would see them.
    The interval that straddles midnight therefore belongs to neither day.

    Returns:
        DataFrame with columns ['date', 'samples', 'energy_kwh'] sorted by date,
        where 'date' is a ``YYYY-MM-DD`` string.
    """
    columns = ["date", "samples", "energy_kwh"]
    if not readings:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(readings, columns=["ts", "power"])
    df["ts"] = pd.to_datetime(df["ts"], utc=True)
    df["date"] = df["ts"].dt.tz_convert(tz).dt.strftime("%Y-%m-%d")

    rows = []
    for day, group in df.groupby("date", sort=True):
        power = group["power"].to_numpy(dtype=float)
        seconds = (group["ts"] - group["ts"].iloc[0]).dt.total_seconds().to_numpy()
        hours = np.diff(seconds) / _SECONDS_PER_HOUR
        energy = float(np.sum((power[1:] + power[:-1]) / 2 * hours)) if len(power) > 1 else 0.0
        rows.append({"date": day, "samples": len(group), "energy_kwh": energy})

    logger.debug("Integrated %d readings into %d daily buckets", len(readings), len(rows))
    return pd.DataFrame(rows, columns=columns)
