from datetime import date, tzinfo

from fastapi import HTTPException, Query, status

from app.config import settings
from app.services.windows import billing_tz, parse_date, parse_month


def bad_request(error: str, example: str | dict) -> HTTPException:
    """400 carrying an example of a valid request."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": error, "example": example},
    )


def require_date(value: str | None, example: str) -> date:
    if not value:
        raise bad_request("Missing date. Use YYYY-MM-DD", example)
    try:
        return parse_date(value)
    except ValueError as exc:
        raise bad_request(str(exc), example) from exc


def require_month(value: str | None, example: str) -> date:
    if not value:
        raise bad_request("Missing month. Use YYYY-MM", example)
    try:
        return parse_month(value)
    except ValueError as exc:
        raise bad_request(str(exc), example) from exc


async def get_rate_per_kwh(
    rate_per_kwh: float | None = Query(
        None,
        alias="ratePerKwh",
        ge=0,
        description="Override the configured electricity rate (per kWh).",
    ),
) -> float:
    """FastAPI dependency — per-request rate, falling back to the configured default."""
    return settings.default_rate_per_kwh if rate_per_kwh is None else rate_per_kwh


async def get_billing_tz() -> tzinfo:
    return billing_tz()
