"""
db/repositories/daily_record_repository.py

Read-only access to per-region daily records.

The report pipeline depends only on :class:`RecordStore`: a point lookup
keyed by ``(region, day)`` and a restartable full scan. The SQLAlchemy
implementation never writes; ingestion owns the table.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from datetime import date

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.daily_record import DailyRecord
from app.errors import StoreUnavailableError
from db.models.daily_record import DailyRecordRow

logger = logging.getLogger(__name__)

RecordKey = tuple[str, date]

SCAN_BATCH_SIZE = 500


class RecordStore(ABC):
    """
    Key/range-query view over daily records.
    """

    @abstractmethod
    def get(self, region: str, day: date) -> DailyRecord | None:
        """
        Return the record for ``(region, day)``, or ``None`` when absent.
        """

    @abstractmethod
    def scan_all(self) -> Iterator[tuple[RecordKey, DailyRecord]]:
        """
        Return a fresh iterator over every known ``(key, record)`` pair.
        """


def to_domain(row: DailyRecordRow) -> DailyRecord:
    """Map an ORM row onto the immutable domain record."""
    return DailyRecord(
        region=row.region,
        record_date=row.record_date,
        delta_confirmed=int(row.delta_confirmed),
        delta_recovered=int(row.delta_recovered),
        delta_deceased=int(row.delta_deceased),
        current_confirmed=int(row.current_confirmed),
        current_recovered=int(row.current_recovered),
        current_deceased=int(row.current_deceased),
        tested_today=row.tested_today,
        doubling_rate=row.doubling_rate,
    )


class SQLAlchemyRecordStore(RecordStore):
    """
    :class:`RecordStore` backed by the ``daily_records`` table.

    Parameters
    ----------
    session_factory:
        Zero-argument callable returning a new ``Session``. Each lookup and
        each scan opens and closes its own session, so concurrently running
        jobs never share one.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, region: str, day: date) -> DailyRecord | None:
        stmt = select(DailyRecordRow).where(
            DailyRecordRow.region == region,
            DailyRecordRow.record_date == day,
        )
        try:
            with self._session_factory() as session:
                row = session.scalars(stmt).one_or_none()
                return to_domain(row) if row is not None else None
        except SQLAlchemyError as exc:
            logger.error("Record lookup failed region=%r day=%s: %s", region, day, exc)
            raise StoreUnavailableError(f"lookup failed for {region!r} on {day}") from exc

    def scan_all(self) -> Iterator[tuple[RecordKey, DailyRecord]]:
        """
        Stream every record in batches of :data:`SCAN_BATCH_SIZE` rows.

        The session is opened on first iteration and closed once the
        iterator is exhausted or discarded. Store errors surface during
        iteration as :class:`StoreUnavailableError`.
        """
        # Rows come back in insertion order so "first match wins" consumers
        # see a stable order across runs.
        stmt = (
            select(DailyRecordRow)
            .order_by(DailyRecordRow.id)
            .execution_options(yield_per=SCAN_BATCH_SIZE)
        )
        return self._stream(stmt)

    def _stream(self, stmt: Select) -> Iterator[tuple[RecordKey, DailyRecord]]:
        try:
            with self._session_factory() as session:
                for row in session.scalars(stmt):
                    record = to_domain(row)
                    yield record.key, record
        except SQLAlchemyError as exc:
            logger.error("Record scan failed: %s", exc)
            raise StoreUnavailableError("full scan failed") from exc
