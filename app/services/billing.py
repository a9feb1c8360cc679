"""Energy-to-money conversion."""

from app.config import settings


def round2(value: float) -> float:
    """Presentation rounding: two decimals, applied once at the response edge."""
    return round(value, 2)


def calculate_bill(energy_kwh: float, rate_per_kwh: float | None = None) -> float:
    """Bill for *energy_kwh* at *rate_per_kwh* (defaults to the configured rate)."""
    if rate_per_kwh is None:
        rate_per_kwh = settings.default_rate_per_kwh
    return round2(energy_kwh * rate_per_kwh)
