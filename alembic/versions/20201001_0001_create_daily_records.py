"""create daily_records table

Revision ID: 20201001_0001
Revises:
Create Date: 2020-10-01 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20201001_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "daily_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("region", sa.String(length=100), nullable=False,
                  comment="State/province name, or the national aggregate region"),
        sa.Column("record_date", sa.Date(), nullable=False,
                  comment="Calendar day (UTC) the counters describe"),
        sa.Column("delta_confirmed", sa.BigInteger(), nullable=False),
        sa.Column("delta_recovered", sa.BigInteger(), nullable=False),
        sa.Column("delta_deceased", sa.BigInteger(), nullable=False),
        sa.Column("current_confirmed", sa.BigInteger(), nullable=False),
        sa.Column("current_recovered", sa.BigInteger(), nullable=False),
        sa.Column("current_deceased", sa.BigInteger(), nullable=False),
        sa.Column("tested_today", sa.String(length=32), nullable=True),
        sa.Column("doubling_rate", sa.String(length=32), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("region", "record_date", name="uq_daily_records_region_date"),
    )
    op.create_index(
        "ix_daily_records_record_date",
        "daily_records",
        ["record_date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_daily_records_record_date", table_name="daily_records")
    op.drop_table("daily_records")
