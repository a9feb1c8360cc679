from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class PowerSample(Base):
    """One meter reading: instantaneous power (kW) plus voltage / current detail.

    Append-only. The meter writes rows; this service only reads them, always
    ordered by ts, which is the integration order for every energy figure.
    """

    __tablename__ = "power_samples"
    __table_args__ = (Index("ix_power_samples_ts", "ts"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    power: Mapped[float] = mapped_column(Float, nullable=False)
    voltage: Mapped[float | None] = mapped_column(Float, nullable=True)
    current: Mapped[float | None] = mapped_column(Float, nullable=True)

    # ── Per-phase detail (three-phase meters only) ─────────────────────────────
    active_power_phase_a: Mapped[float | None] = mapped_column(Float, nullable=True)
    active_power_phase_b: Mapped[float | None] = mapped_column(Float, nullable=True)
    active_power_phase_c: Mapped[float | None] = mapped_column(Float, nullable=True)
    voltage1: Mapped[float | None] = mapped_column(Float, nullable=True)
    voltage2: Mapped[float | None] = mapped_column(Float, nullable=True)
    voltage3: Mapped[float | None] = mapped_column(Float, nullable=True)
    voltage_ln: Mapped[float | None] = mapped_column(Float, nullable=True)
    voltage_ll: Mapped[float | None] = mapped_column(Float, nullable=True)
