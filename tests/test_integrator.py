"""Tests for the trapezoidal energy integrator."""

from datetime import datetime, timedelta, timezone

import pytest
import pytz

from app.services.integrator import (
    integrate_daily,
    integrate_energy,
    integrate_hourly,
    interval_energy,
    longest_gap,
)

BANGKOK = pytz.timezone("Asia/Bangkok")
KOLKATA = pytz.timezone("Asia/Kolkata")


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# ── Totals ─────────────────────────────────────────────────────────────────────

def test_one_hour_example_is_15_kwh():
    readings = [(utc(2025, 10, 3, 0, 0), 10.0), (utc(2025, 10, 3, 1, 0), 20.0)]
    assert integrate_energy(readings) == pytest.approx(15.0)


@pytest.mark.parametrize(
    "p0, p1, minutes",
    [(0.0, 0.0, 10), (3.2, 4.8, 1), (12.0, 2.0, 45), (7.5, 7.5, 600)],
)
def test_two_samples_equal_trapezoid(p0, p1, minutes):
    t0 = utc(2025, 1, 1, 12, 0)
    readings = [(t0, p0), (t0 + timedelta(minutes=minutes), p1)]
    assert integrate_energy(readings) == pytest.approx((p0 + p1) / 2 * minutes / 60)


def test_fewer_than_two_samples_integrate_to_zero():
    assert integrate_energy([]) == 0.0
    assert integrate_energy([(utc(2025, 1, 1), 42.0)]) == 0.0


def test_additivity_over_consecutive_pairs():
    t0 = utc(2025, 3, 1)
    offsets = [0, 7, 19, 20, 95, 180, 181, 600]
    powers = [1.0, 2.5, 0.0, 4.0, 3.3, 9.1, 0.4, 2.2]
    readings = [(t0 + timedelta(seconds=o * 13), p) for o, p in zip(offsets, powers)]

    per_pair = sum(interval_energy(a, b) for a, b in zip(readings, readings[1:]))
    assert integrate_energy(readings) == pytest.approx(per_pair)
    assert integrate_energy(readings[:4]) + integrate_energy(readings[3:]) == pytest.approx(
        integrate_energy(readings)
    )


def test_large_gap_is_integrated_at_average_power():
    readings = [(utc(2025, 1, 1), 2.0), (utc(2025, 1, 3), 4.0)]
    assert integrate_energy(readings) == pytest.approx(3.0 * 48)
    assert longest_gap(readings) == timedelta(days=2)


def test_naive_timestamps_are_treated_as_utc():
    naive = [(datetime(2025, 1, 1, 0), 1.0), (datetime(2025, 1, 1, 2), 1.0)]
    assert integrate_energy(naive) == pytest.approx(2.0)


# ── Hourly buckets ─────────────────────────────────────────────────────────────

def test_interval_crossing_an_hour_is_split_proportionally():
    readings = [(utc(2025, 1, 1, 0, 30), 10.0), (utc(2025, 1, 1, 1, 30), 10.0)]
    hourly = integrate_hourly(readings, pytz.utc)

    assert hourly.energy_kwh[0] == pytest.approx(5.0)
    assert hourly.energy_kwh[1] == pytest.approx(5.0)
    assert sum(hourly.energy_kwh[2:]) == 0.0


def test_bucketing_does_not_change_two_sample_energy():
    readings = [(utc(2025, 1, 1, 3, 10), 6.0), (utc(2025, 1, 1, 7, 50), 2.0)]
    hourly = integrate_hourly(readings, pytz.utc)

    assert hourly.total_kwh == pytest.approx(integrate_energy(readings))
    # 03:10–04:00 is 50 minutes at 4 kW average
    assert hourly.energy_kwh[3] == pytest.approx(4.0 * 50 / 60)
    assert hourly.energy_kwh[7] == pytest.approx(4.0 * 50 / 60)


def test_buckets_follow_the_local_timezone():
    # 17:00 UTC is midnight in Bangkok (UTC+7)
    readings = [(utc(2025, 10, 2, 17, 0), 2.0), (utc(2025, 10, 2, 18, 0), 2.0)]
    hourly = integrate_hourly(readings, BANGKOK)

    assert hourly.energy_kwh[0] == pytest.approx(2.0)
    assert hourly.energy_kwh[17] == 0.0


def test_half_hour_offset_zone_splits_on_local_hours():
    # 00:00 UTC is 05:30 in Kolkata, so the first half hour lands in local hour 5
    readings = [(utc(2025, 1, 1, 0, 0), 4.0), (utc(2025, 1, 1, 1, 0), 4.0)]
    hourly = integrate_hourly(readings, KOLKATA)

    assert hourly.energy_kwh[5] == pytest.approx(2.0)
    assert hourly.energy_kwh[6] == pytest.approx(2.0)


def test_partition_completeness_over_a_day():
    t0 = utc(2025, 6, 1, 17, 0)
    readings = []
    for i in range(0, 24 * 60, 7):
        readings.append((t0 + timedelta(minutes=i, seconds=i % 11), (i % 13) * 0.37))

    hourly = integrate_hourly(readings, BANGKOK)
    assert len(hourly.energy_kwh) == 24
    assert hourly.total_kwh == pytest.approx(integrate_energy(readings))


def test_hourly_peak_tracks_interval_endpoints():
    readings = [
        (utc(2025, 1, 1, 8, 50), 1.0),
        (utc(2025, 1, 1, 9, 10), 7.0),
        (utc(2025, 1, 1, 9, 40), 3.0),
    ]
    hourly = integrate_hourly(readings, pytz.utc)

    assert hourly.peak_kw[8] == 7.0
    assert hourly.peak_kw[9] == 7.0
    assert hourly.peak_kw[10] == 0.0


def test_empty_readings_give_empty_buckets():
    hourly = integrate_hourly([], pytz.utc)
    assert hourly.energy_kwh == [0.0] * 24
    assert hourly.total_kwh == 0.0


# ── Daily buckets ──────────────────────────────────────────────────────────────

def test_integrate_daily_groups_by_local_date():
    readings = [
        # Bangkok 2025-10-03 00:00 and 01:00
        (utc(2025, 10, 2, 17, 0), 10.0),
        (utc(2025, 10, 2, 18, 0), 20.0),
        # Bangkok 2025-10-04 08:00 and 10:00
        (utc(2025, 10, 4, 1, 0), 4.0),
        (utc(2025, 10, 4, 3, 0), 4.0),
    ]
    daily = integrate_daily(readings, BANGKOK)

    assert list(daily["date"]) == ["2025-10-03", "2025-10-04"]
    assert list(daily["samples"]) == [2, 2]
    assert daily["energy_kwh"].iloc[0] == pytest.approx(15.0)
    assert daily["energy_kwh"].iloc[1] == pytest.approx(8.0)


def test_integrate_daily_matches_single_day_integration():
    t0 = utc(2025, 5, 5, 0, 0)
    readings = [(t0 + timedelta(minutes=5 * i), 1.0 + (i % 4)) for i in range(400)]
    daily = integrate_daily(readings, pytz.utc)

    for row in daily.itertuples(index=False):
        day_readings = [r for r in readings if r[0].strftime("%Y-%m-%d") == row.date]
        assert row.energy_kwh == pytest.approx(integrate_energy(day_readings))


def test_integrate_daily_empty():
    daily = integrate_daily([], BANGKOK)
    assert daily.empty
    assert list(daily.columns) == ["date", "samples", "energy_kwh"]
