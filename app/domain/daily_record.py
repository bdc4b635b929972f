"""
app/domain/daily_record.py

Domain models read by the report pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailyRecord:
    """
    One region's epidemiological state on one calendar day (UTC).

    Delta fields are signed: correction days legitimately carry negative
    values. Cumulative fields are never negative.
    """

    region: str
    record_date: date
    delta_confirmed: int
    delta_recovered: int
    delta_deceased: int
    current_confirmed: int
    current_recovered: int
    current_deceased: int
    tested_today: str | None = None
    doubling_rate: str | None = None

    @property
    def key(self) -> tuple[str, date]:
        return (self.region, self.record_date)


@dataclass(frozen=True)
class SeriesPoint:
    """
    One labelled value of a derived series.
    """

    label: str
    value: float
