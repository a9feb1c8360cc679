import pytz
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "PowerBill API"
    app_version: str = "1.1.0"
    debug: bool = False
    cors_allow_origins: list[str] = ["*"]

    # ── Database ───────────────────────────────────────────────────────────────
    database_url: str = "postgresql+asyncpg://powerbill:powerbill@db:5432/powerbill"

    # ── Redis / Celery ─────────────────────────────────────────────────────────
    redis_url: str = "redis://redis:6379/0"

    # ── Billing ────────────────────────────────────────────────────────────────
    # Every day / hour / month window is cut in this zone; samples are stored in UTC.
    billing_timezone: str = "Asia/Bangkok"
    default_rate_per_kwh: float = 4.4
    currency_symbol: str = "฿"

    # ── Solar sizing ───────────────────────────────────────────────────────────
    solar_sun_hours: float = 4.0
    daytime_start_hour: int = 6
    daytime_end_hour: int = 18  # inclusive

    # ── Peak monitor ───────────────────────────────────────────────────────────
    peak_monitor_enabled: bool = True
    peak_poll_interval_seconds: float = 10.0
    peak_threshold_kw: float = 10.0

    # ── Web Push (VAPID) ───────────────────────────────────────────────────────
    vapid_private_key: str | None = None
    vapid_public_key: str | None = None
    vapid_subject: str = "mailto:admin@example.com"

    # Local hour at which Celery beat emits the yesterday-vs-day-before digest
    daily_diff_digest_hour: int = 8

    @field_validator("billing_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown billing_timezone '{v}'") from exc
        return v

    @field_validator("default_rate_per_kwh", "peak_threshold_kw")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("solar_sun_hours", "peak_poll_interval_seconds")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("daytime_start_hour", "daytime_end_hour", "daily_diff_digest_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError("hour must be between 0 and 23")
        return v

    @model_validator(mode="after")
    def validate_daytime_window(self) -> "Settings":
        if self.daytime_start_hour > self.daytime_end_hour:
            raise ValueError(
                f"daytime_start_hour ({self.daytime_start_hour}) must not be after "
                f"daytime_end_hour ({self.daytime_end_hour})"
            )
        return self

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
