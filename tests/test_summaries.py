"""Tests for the window summaries (pure, no I/O)."""

from datetime import date, datetime, timedelta, timezone

import pandas as pd
import pytest
import pytz

from app.services.summaries import (
    calendar_events,
    describe_daily_diff,
    estimate_solar_size,
    summarize_daily_diff,
    summarize_day,
    summarize_hours,
    summarize_month,
)

DAY = date(2025, 10, 3)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def _constant_day(power_kw: float, step_minutes: int = 10) -> list[tuple[datetime, float]]:
    """A full UTC day of readings at constant power, including the closing midnight."""
    t0 = utc(2025, 10, 3)
    return [
        (t0 + timedelta(minutes=m), power_kw) for m in range(0, 24 * 60 + 1, step_minutes)
    ]


# ── summarize_day ──────────────────────────────────────────────────────────────

def test_summarize_day_example():
    readings = [(utc(2025, 10, 3, 0), 10.0), (utc(2025, 10, 3, 1), 20.0)]
    summary = summarize_day(DAY, readings, 4.4)

    assert summary["date"] == "2025-10-03"
    assert summary["samples"] == 2
    assert summary["total_energy_kwh"] == 15.0
    assert summary["electricity_bill"] == 66.0
    assert summary["avg_power_kw"] == 15.0
    assert summary["max_power_kw"] == 20.0
    assert summary["min_power_kw"] == 10.0
    assert summary["longest_gap_minutes"] == 60.0
    assert summary["rate_per_kwh"] == 4.4


def test_summarize_day_empty_is_zero_filled():
    summary = summarize_day(DAY, [], 4.4)

    assert summary["samples"] == 0
    assert summary["total_energy_kwh"] == 0
    assert summary["electricity_bill"] == 0
    assert summary["avg_power_kw"] == 0
    assert summary["max_power_kw"] == 0
    assert summary["min_power_kw"] == 0


def test_rounding_happens_once_at_the_edge():
    # Ten one-minute intervals of 0.004 kWh each; per-interval rounding would give 0
    t0 = utc(2025, 10, 3)
    readings = [(t0 + timedelta(minutes=i), 0.24) for i in range(11)]
    summary = summarize_day(DAY, readings, 1.0)
    assert summary["total_energy_kwh"] == 0.04
    assert summary["electricity_bill"] == 0.04


# ── summarize_hours ────────────────────────────────────────────────────────────

def test_summarize_hours_has_24_labelled_entries():
    readings = [(utc(2025, 10, 3, 0), 10.0), (utc(2025, 10, 3, 1), 20.0)]
    result = summarize_hours(DAY, readings, 4.4, pytz.utc)

    assert result["date"] == "2025-10-03"
    assert [h["hour"] for h in result["hourly"]] == [f"{h:02d}:00" for h in range(24)]
    assert result["hourly"][0] == {"hour": "00:00", "energy_kwh": 15.0, "electricity_bill": 66.0}
    assert all(h["energy_kwh"] == 0 for h in result["hourly"][1:])


def test_summarize_hours_empty_day():
    result = summarize_hours(DAY, [], 4.4, pytz.utc)
    assert len(result["hourly"]) == 24
    assert all(h["energy_kwh"] == 0 and h["electricity_bill"] == 0 for h in result["hourly"])


# ── summarize_daily_diff ───────────────────────────────────────────────────────

def test_daily_diff_is_day_before_minus_yesterday():
    yesterday = [(utc(2025, 10, 2, 0), 2.0), (utc(2025, 10, 2, 5), 2.0)]    # 10 kWh
    day_before = [(utc(2025, 10, 1, 0), 3.0), (utc(2025, 10, 1, 5), 3.0)]   # 15 kWh
    diff = summarize_daily_diff(date(2025, 10, 2), yesterday, date(2025, 10, 1), day_before, 4.4)

    assert diff["yesterday"] == {
        "date": "2025-10-02", "energy_kwh": 10.0, "electricity_bill": 44.0, "samples": 2,
    }
    assert diff["dayBefore"]["energy_kwh"] == 15.0
    assert diff["diff"] == {"kWh": 5.0, "electricity_bill": 22.0}


def test_daily_diff_without_data():
    diff = summarize_daily_diff(date(2025, 10, 2), [], date(2025, 10, 1), [], 4.4)
    assert diff["yesterday"]["samples"] == 0
    assert diff["diff"] == {"kWh": 0, "electricity_bill": 0}


@pytest.mark.parametrize(
    "kwh, expected",
    [(5.0, "5.00 kWh less"), (-2.5, "2.50 kWh more"), (0.0, "the same")],
)
def test_describe_daily_diff(kwh, expected):
    diff = {
        "yesterday": {"date": "2025-10-02", "energy_kwh": 10.0, "electricity_bill": 44.0},
        "diff": {"kWh": kwh, "electricity_bill": kwh * 4.4},
    }
    title, body = describe_daily_diff(diff)
    assert title
    assert expected in body
    assert "2025-10-02" in body


# ── estimate_solar_size ────────────────────────────────────────────────────────

def test_solar_size_splits_day_and_night():
    result = estimate_solar_size(
        DAY, _constant_day(1.0), 4.4, pytz.utc,
        sun_hours=4.0, daytime_start_hour=6, daytime_end_hour=18,
    )

    # 06:00–18:59 is 13 hours, the remaining 11 are night
    assert result["day_energy_kwh"] == pytest.approx(13.0)
    assert result["night_energy_kwh"] == pytest.approx(11.0)
    assert result["total_energy_kwh"] == pytest.approx(24.0)
    assert result["solar_capacity_kw"] == pytest.approx(13.0 / 4.0, abs=0.01)
    assert result["savings_day"] == pytest.approx(13.0 * 4.4, abs=0.01)
    assert result["savings_month"] == pytest.approx(13.0 * 4.4 * 30, abs=0.01)
    assert result["savings_year"] == pytest.approx(13.0 * 4.4 * 365, abs=0.01)
    assert result["peak_power_day_kw"] == 1.0
    assert result["daytime_hours"] == "06:00-18:59"
    assert len(result["hourly"]) == 24


def test_solar_size_empty_day_is_zero_filled():
    result = estimate_solar_size(
        DAY, [], 4.4, pytz.utc, sun_hours=4.0, daytime_start_hour=6, daytime_end_hour=18
    )
    assert result["samples"] == 0
    assert result["solar_capacity_kw"] == 0
    assert result["peak_power_day_kw"] == 0
    assert all(h["peak_power_kw"] == 0 for h in result["hourly"])


# ── Multi-day ──────────────────────────────────────────────────────────────────

def _daily_frame() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"date": "2025-10-01", "samples": 100, "energy_kwh": 12.346},
            {"date": "2025-10-02", "samples": 80, "energy_kwh": 10.0},
        ]
    )


def test_calendar_events_two_per_day():
    events = calendar_events(_daily_frame(), 4.4, "฿")

    assert len(events) == 4
    assert events[0] == {
        "title": "12.35 Unit",
        "start": "2025-10-01",
        "extendedProps": {"type": "energy", "display_text": "12.35 Unit"},
    }
    assert events[1]["title"] == f"{round(12.346 * 4.4, 2)}฿"
    assert events[1]["extendedProps"]["type"] == "bill"
    assert events[3]["start"] == "2025-10-02"


def test_calendar_events_empty():
    empty = pd.DataFrame(columns=["date", "samples", "energy_kwh"])
    assert calendar_events(empty, 4.4, "฿") == []


def test_summarize_month_totals():
    result = summarize_month(date(2025, 10, 1), _daily_frame(), 4.4)

    assert result["month"] == "2025-10"
    assert result["samples"] == 180
    assert result["total_energy_kwh"] == round(22.346, 2)
    assert result["electricity_bill"] == round(22.346 * 4.4, 2)
    assert [d["date"] for d in result["days"]] == ["2025-10-01", "2025-10-02"]


def test_summarize_month_empty():
    empty = pd.DataFrame(columns=["date", "samples", "energy_kwh"])
    result = summarize_month(date(2025, 10, 1), empty, 4.4)
    assert result["samples"] == 0
    assert result["days"] == []
    assert result["total_energy_kwh"] == 0
