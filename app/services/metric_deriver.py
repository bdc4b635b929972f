"""
app/services/metric_deriver.py

Pure derivations over daily records.

Nothing here touches the store. Every function is total: malformed or
missing inputs produce ``None`` or carry state forward instead of raising.

Formulas
--------
Active (daily)       = delta_confirmed - delta_recovered - delta_deceased
Active (cumulative)  = current_confirmed - current_recovered - current_deceased
Positivity (day)     = delta_confirmed / tested_today * 100
Moving positivity    = mean of the last 5 positivity samples
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, replace

from app.domain.daily_record import DailyRecord

logger = logging.getLogger(__name__)

MOVING_AVERAGE_WINDOW = 5
DISPLAY_PRECISION = 2


# ---------------------------------------------------------------------------
# Active counts
# ---------------------------------------------------------------------------


def active(record: DailyRecord) -> int:
    """Daily active change; may be negative on correction days."""
    return record.delta_confirmed - record.delta_recovered - record.delta_deceased


def cumulative_active(record: DailyRecord) -> int:
    """Running active total; history charts show it unclamped."""
    return record.current_confirmed - record.current_recovered - record.current_deceased


def display_active(record: DailyRecord) -> int:
    """
    Daily active change clamped at zero.

    Only ranking snapshots clamp; trend charts keep the true value.
    """
    return max(active(record), 0)


# ---------------------------------------------------------------------------
# Snapshot filters
# ---------------------------------------------------------------------------


def is_negative(record: DailyRecord) -> bool:
    """True when any delta is negative (suspect correction entry)."""
    return record.delta_confirmed < 0 or record.delta_recovered < 0 or record.delta_deceased < 0


def not_yet_updated(record: DailyRecord) -> bool:
    """True when all three deltas are exactly zero (region not reported yet)."""
    return record.delta_confirmed == 0 and record.delta_recovered == 0 and record.delta_deceased == 0


def is_rankable(record: DailyRecord | None) -> bool:
    return record is not None and not is_negative(record) and not not_yet_updated(record)


# ---------------------------------------------------------------------------
# Pass-through string metrics
# ---------------------------------------------------------------------------


def _parse_float(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    return None if math.isnan(value) else value


def doubling_rate(record: DailyRecord) -> float | None:
    """Stored doubling rate as a float, or ``None`` when absent or unparseable."""
    return _parse_float(record.doubling_rate)


def tested_count(record: DailyRecord) -> float | None:
    """Tests reported for the day, or ``None`` when absent or unparseable."""
    return _parse_float(record.tested_today)


def has_testing_data(record: DailyRecord | None) -> bool:
    return record is not None and tested_count(record) is not None


# ---------------------------------------------------------------------------
# Moving positivity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MovingAverage:
    """
    Fixed-capacity window of the most recent samples.

    Immutable: :meth:`push` returns a new window, so scans thread the value
    through the loop explicitly.
    """

    capacity: int = MOVING_AVERAGE_WINDOW
    samples: tuple[float, ...] = ()

    def push(self, value: float) -> "MovingAverage":
        return replace(self, samples=(self.samples + (value,))[-self.capacity :])

    @property
    def mean(self) -> float:
        if not self.samples:
            return math.nan
        return math.fsum(self.samples) / len(self.samples)


def positivity_ratio(confirmed: float | None, tested: float | None) -> float | None:
    """
    Percentage of tests that came back positive, or ``None`` when either
    side is missing or no tests were reported.
    """
    if confirmed is None or tested is None or tested <= 0:
        return None
    return confirmed / tested * 100.0


def positivity_series(
    pairs: Iterable[tuple[float | None, float | None]],
    window: int = MOVING_AVERAGE_WINDOW,
) -> list[float]:
    """
    Emit the moving positivity mean for each ``(confirmed, tested)`` day.

    Days with a usable ratio push it into the window before the mean is
    emitted. Days without one emit the current mean unchanged, so the
    average is carried across gaps. Before the first sample the mean is
    ``nan``; :func:`display_value` turns that into ``0.0``.
    """
    moving = MovingAverage(capacity=window)
    emitted: list[float] = []
    for confirmed, tested in pairs:
        ratio = positivity_ratio(confirmed, tested)
        if ratio is not None:
            moving = moving.push(ratio)
        emitted.append(moving.mean)
    return emitted


def record_positivity_series(
    records: Iterable[DailyRecord | None],
    window: int = MOVING_AVERAGE_WINDOW,
) -> list[float]:
    """:func:`positivity_series` over records; absent records carry the mean forward."""
    pairs = (
        (float(record.delta_confirmed), tested_count(record)) if record is not None else (None, None)
        for record in records
    )
    return positivity_series(pairs, window=window)


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------


def display_value(value: float | None) -> float:
    """
    Round a value for a chart dataset.

    ``None`` and ``nan`` become ``0.0``.
    """
    if value is None or math.isnan(value):
        return 0.0
    return round(float(value), DISPLAY_PRECISION)
