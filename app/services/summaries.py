"""Window summaries built from the integrator and the billing calculator.

Every function is pure: it takes readings that were already fetched for the
window and returns a JSON-ready dict. Empty input produces the same shape with
zeroed values, so callers can answer 404 without inventing fields.
"""

from collections.abc import Sequence
from datetime import date, tzinfo

import pandas as pd

from app.services.billing import calculate_bill, round2
from app.services.integrator import (
    Reading,
    integrate_energy,
    integrate_hourly,
    longest_gap,
)


def _hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


# ── Single day ─────────────────────────────────────────────────────────────────

def summarize_day(day: date, readings: Sequence[Reading], rate_per_kwh: float) -> dict:
    """Daily bill: sample count, energy, bill and power statistics."""
    powers = [power for _, power in readings]
    energy_kwh = integrate_energy(readings)

    return {
        "date": day.isoformat(),
        "samples": len(readings),
        "total_energy_kwh": round2(energy_kwh),
        "avg_power_kw": round2(sum(powers) / len(powers)) if powers else 0,
        "max_power_kw": round2(max(powers)) if powers else 0,
        "min_power_kw": round2(min(powers)) if powers else 0,
        "longest_gap_minutes": round2(longest_gap(readings).total_seconds() / 60),
        "electricity_bill": calculate_bill(energy_kwh, rate_per_kwh),
        "rate_per_kwh": rate_per_kwh,
    }


def summarize_hours(
    day: date, readings: Sequence[Reading], rate_per_kwh: float, tz: tzinfo
) -> dict:
    """Hour-by-hour energy and bill for one local day (always 24 entries)."""
    hourly = integrate_hourly(readings, tz)
    return {
        "date": day.isoformat(),
        "rate_per_kwh": rate_per_kwh,
        "hourly": [
            {
                "hour": _hour_label(hour),
                "energy_kwh": round2(energy),
                "electricity_bill": calculate_bill(energy, rate_per_kwh),
            }
            for hour, energy in enumerate(hourly.energy_kwh)
        ],
    }


# ── Day over day ───────────────────────────────────────────────────────────────

def _day_usage(
    day: date, readings: Sequence[Reading], rate_per_kwh: float
) -> tuple[dict, float]:
    energy_kwh = integrate_energy(readings)
    usage = {
        "date": day.isoformat(),
        "energy_kwh": round2(energy_kwh),
        "electricity_bill": calculate_bill(energy_kwh, rate_per_kwh),
        "samples": len(readings),
    }
    return usage, energy_kwh


def summarize_daily_diff(
    yesterday: date,
    yesterday_readings: Sequence[Reading],
    day_before: date,
    day_before_readings: Sequence[Reading],
    rate_per_kwh: float,
) -> dict:
    """Yesterday against the day before.

    The diff is ``dayBefore - yesterday``: positive means yesterday used less.
    Keys follow the dashboard contract (``dayBefore``, ``diff.kWh``).
    """
    latest, latest_kwh = _day_usage(yesterday, yesterday_readings, rate_per_kwh)
    previous, previous_kwh = _day_usage(day_before, day_before_readings, rate_per_kwh)
    diff_kwh = previous_kwh - latest_kwh

    return {
        "yesterday": latest,
        "dayBefore": previous,
        "diff": {
            "kWh": round2(diff_kwh),
            "electricity_bill": calculate_bill(diff_kwh, rate_per_kwh),
        },
        "rate_per_kwh": rate_per_kwh,
    }


def describe_daily_diff(diff: dict) -> tuple[str, str]:
    """Notification title and body for a daily diff."""
    kwh = diff["diff"]["kWh"]
    yesterday = diff["yesterday"]
    if kwh > 0:
        trend = f"{kwh:.2f} kWh less than the day before"
    elif kwh < 0:
        trend = f"{-kwh:.2f} kWh more than the day before"
    else:
        trend = "the same as the day before"
    body = (
        f"Yesterday ({yesterday['date']}) used {yesterday['energy_kwh']:.2f} kWh "
        f"({yesterday['electricity_bill']:.2f}), {trend}."
    )
    return "📊 Daily usage summary", body


# ── Solar sizing ───────────────────────────────────────────────────────────────

def estimate_solar_size(
    day: date,
    readings: Sequence[Reading],
    rate_per_kwh: float,
    tz: tzinfo,
    sun_hours: float,
    daytime_start_hour: int,
    daytime_end_hour: int,
) -> dict:
    """Split a day's energy into daytime / night-time and size a PV array.

    Capacity is the daytime energy spread over *sun_hours* equivalent full-sun
    hours. Savings assume every daytime kWh is offset at *rate_per_kwh*.
    """
    hourly = integrate_hourly(readings, tz)
    daytime = range(daytime_start_hour, daytime_end_hour + 1)

    day_energy = sum(e for h, e in enumerate(hourly.energy_kwh) if h in daytime)
    night_energy = sum(e for h, e in enumerate(hourly.energy_kwh) if h not in daytime)
    total_energy = day_energy + night_energy
    savings_day = day_energy * rate_per_kwh

    return {
        "date": day.isoformat(),
        "samples": len(readings),
        "rate_per_kwh": rate_per_kwh,
        "hourly": [
            {
                "hour": _hour_label(hour),
                "energy_kwh": round2(energy),
                "electricity_bill": calculate_bill(energy, rate_per_kwh),
                "peak_power_kw": round2(hourly.peak_kw[hour]),
            }
            for hour, energy in enumerate(hourly.energy_kwh)
        ],
        "daytime_hours": f"{_hour_label(daytime_start_hour)}-{daytime_end_hour:02d}:59",
        "day_energy_kwh": round2(day_energy),
        "night_energy_kwh": round2(night_energy),
        "day_cost": calculate_bill(day_energy, rate_per_kwh),
        "night_cost": calculate_bill(night_energy, rate_per_kwh),
        "total_energy_kwh": round2(total_energy),
        "total_cost": calculate_bill(total_energy, rate_per_kwh),
        "sun_hours": sun_hours,
        "solar_capacity_kw": round2(day_energy / sun_hours),
        "peak_power_day_kw": round2(max(hourly.peak_kw)),
        "savings_day": round2(savings_day),
        "savings_month": round2(savings_day * 30),
        "savings_year": round2(savings_day * 365),
    }


# ── Multi-day ──────────────────────────────────────────────────────────────────

def calendar_events(daily: pd.DataFrame, rate_per_kwh: float, currency: str) -> list[dict]:
    """Two calendar events per day: energy in units and the bill."""
    events: list[dict] = []
    for row in daily.itertuples(index=False):
        energy = round2(row.energy_kwh)
        bill = calculate_bill(row.energy_kwh, rate_per_kwh)
        events.append(
            {
                "title": f"{energy} Unit",
                "start": row.date,
                "extendedProps": {"type": "energy", "display_text": f"{energy} Unit"},
            }
        )
        events.append(
            {
                "title": f"{bill}{currency}",
                "start": row.date,
                "extendedProps": {"type": "bill", "display_text": f"{bill}{currency}"},
            }
        )
    return events


def summarize_month(month: date, daily: pd.DataFrame, rate_per_kwh: float) -> dict:
    """Per-day energy and bill for a month plus the month totals."""
    days = [
        {
            "date": row.date,
            "samples": int(row.samples),
            "energy_kwh": round2(row.energy_kwh),
            "electricity_bill": calculate_bill(row.energy_kwh, rate_per_kwh),
        }
        for row in daily.itertuples(index=False)
    ]
    total_kwh = float(daily["energy_kwh"].sum()) if not daily.empty else 0.0

    return {
        "month": month.strftime("%Y-%m"),
        "days": days,
        "samples": int(daily["samples"].sum()) if not daily.empty else 0,
        "total_energy_kwh": round2(total_kwh),
        "electricity_bill": calculate_bill(total_kwh, rate_per_kwh),
        "rate_per_kwh": rate_per_kwh,
    }
