"""
app/services/window_assembler.py

Builds chronologically ordered date windows over the record store.

Every mode yields one entry per calendar day, oldest first. A day whose
record is missing is kept as an entry with ``record=None``; callers decide
whether to skip it, zero-fill it, or carry state across it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from app.domain.daily_record import DailyRecord

logger = logging.getLogger(__name__)

FetchRecord = Callable[[str, date], "DailyRecord | None"]
ScanRecords = Callable[[], Iterator[tuple[tuple[str, date], DailyRecord]]]

MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


@dataclass(frozen=True)
class WindowEntry:
    """
    One day of an assembled window.
    """

    label: str
    day: date
    record: DailyRecord | None

    @property
    def present(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class CrossRegionEntry:
    """
    One day of a multi-region window: region -> record for that day.

    ``records`` preserves the order in which regions were first matched.
    """

    label: str
    day: date
    records: dict[str, DailyRecord]


def month_day_label(day: date) -> str:
    """
    Short axis label, e.g. ``"Jan 30"``.

    English month names regardless of process locale. The year is not part
    of the label, so windows longer than a year repeat labels.
    """
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.day:02d}"


def date_range(start: date, end: date) -> list[date]:
    """Every calendar day from ``start`` inclusive to ``end`` exclusive."""
    span = (end - start).days
    return [start + timedelta(days=offset) for offset in range(max(span, 0))]


def trailing_days(today: date, days: int) -> list[date]:
    """The ``days`` calendar days before ``today``, oldest first."""
    return date_range(today - timedelta(days=max(days, 0)), today)


def assemble(fetch: FetchRecord, region: str, days: Iterable[date]) -> list[WindowEntry]:
    """Point-lookup ``region`` for each day; absent records stay as ``None`` entries."""
    entries: list[WindowEntry] = []
    for day in days:
        record = fetch(region, day)
        if record is None:
            logger.debug("No record for region=%r day=%s", region, day)
        entries.append(WindowEntry(label=month_day_label(day), day=day, record=record))
    return entries


def fixed_window(fetch: FetchRecord, region: str, today: date, days: int) -> list[WindowEntry]:
    """
    Window over ``today - days .. today - 1`` inclusive.
    """
    return assemble(fetch, region, trailing_days(today, days))


def full_history(fetch: FetchRecord, region: str, start: date, today: date) -> list[WindowEntry]:
    """
    Window over every day from ``start`` (inclusive) to ``today`` (exclusive).
    """
    return assemble(fetch, region, date_range(start, today))


def cross_region(
    scan: ScanRecords,
    regions: Sequence[str],
    days: Sequence[date],
) -> list[CrossRegionEntry]:
    """
    Collect whitelisted regions' records for each requested day from one
    full scan of the store.

    For a given ``(region, day)`` the first record encountered is kept and
    later ones are ignored, so a region's value for a day is never
    overwritten. Conflicting duplicates are logged.
    """
    wanted_regions = set(regions)
    wanted_days = set(days)
    matched: dict[date, dict[str, DailyRecord]] = {day: {} for day in days}

    for (region, day), record in scan():
        if day not in wanted_days or region not in wanted_regions:
            continue
        by_region = matched[day]
        existing = by_region.get(region)
        if existing is None:
            by_region[region] = record
        elif existing != record:
            logger.warning(
                "Conflicting duplicate record ignored region=%r day=%s", region, day
            )

    return [
        CrossRegionEntry(label=month_day_label(day), day=day, records=matched[day])
        for day in days
    ]
