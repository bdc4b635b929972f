"""
db/models/daily_record.py

Per-region daily counters read by the report jobs.
One row per region per calendar day.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import BigInteger, Date, DateTime, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base

_KEY_CONSTRAINT = "uq_daily_records_region_date"


class DailyRecordRow(Base):
    """
    Stored daily state for one region.

    ``delta_*`` columns hold the day's change and may be negative on
    correction days. ``current_*`` columns hold the running totals.
    ``tested_today`` and ``doubling_rate`` arrive as strings from upstream and
    are kept verbatim; rows before testing data existed leave them NULL.

    The unique constraint on ``(region, record_date)`` guarantees at most one
    record per key.
    """

    __tablename__ = "daily_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    region: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="State/province name, or the national aggregate region",
    )
    record_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Calendar day (UTC) the counters describe",
    )
    delta_confirmed: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    delta_recovered: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    delta_deceased: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    current_confirmed: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    current_recovered: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    current_deceased: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tested_today: Mapped[str | None] = mapped_column(String(32), nullable=True)
    doubling_rate: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("region", "record_date", name=_KEY_CONSTRAINT),
        Index("ix_daily_records_record_date", "record_date"),
    )

    def __repr__(self) -> str:
        return f"<DailyRecordRow region={self.region!r} record_date={self.record_date}>"
