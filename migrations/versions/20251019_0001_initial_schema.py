"""Initial schema — power_samples, notifications, push_subscriptions.

Revision ID: 0001
Revises:
Create Date: 2025-10-19 00:00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. power_samples ───────────────────────────────────────────────────────
    op.create_table(
        "power_samples",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("power", sa.Float, nullable=False),
        sa.Column("voltage", sa.Float, nullable=True),
        sa.Column("current", sa.Float, nullable=True),
        sa.Column("active_power_phase_a", sa.Float, nullable=True),
        sa.Column("active_power_phase_b", sa.Float, nullable=True),
        sa.Column("active_power_phase_c", sa.Float, nullable=True),
        sa.Column("voltage1", sa.Float, nullable=True),
        sa.Column("voltage2", sa.Float, nullable=True),
        sa.Column("voltage3", sa.Float, nullable=True),
        sa.Column("voltage_ln", sa.Float, nullable=True),
        sa.Column("voltage_ll", sa.Float, nullable=True),
    )
    op.create_index("ix_power_samples_ts", "power_samples", ["ts"])

    # ── 2. notifications ───────────────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "category",
            sa.Enum("peak", "threshold", "daily_diff", "test", name="notificationcategory"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("power", sa.Float, nullable=True),
        sa.Column("payload", sa.JSON, nullable=True),
        sa.Column("read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_notifications_category", "notifications", ["category"])

    # ── 3. push_subscriptions ──────────────────────────────────────────────────
    op.create_table(
        "push_subscriptions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("endpoint", sa.String(1024), nullable=False, unique=True),
        sa.Column("p256dh", sa.String(255), nullable=False),
        sa.Column("auth", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("push_subscriptions")
    op.drop_index("ix_notifications_category", table_name="notifications")
    op.drop_table("notifications")
    sa.Enum(name="notificationcategory").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_power_samples_ts", table_name="power_samples")
    op.drop_table("power_samples")
