"""
Structured logging helpers for report job phases.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


@contextmanager
def timed_phase(
    logger: logging.Logger,
    *,
    job_id: str,
    phase: str,
    **fields: Any,
) -> Iterator[None]:
    """
    Log ``report_phase_completed`` with the elapsed milliseconds, or
    ``report_phase_failed`` with the error type before re-raising.
    """

    started = time.monotonic()
    try:
        yield
    except Exception as exc:
        log_event(
            logger,
            logging.ERROR,
            "report_phase_failed",
            job_id=job_id,
            phase=phase,
            error_type=type(exc).__name__,
            error=str(exc),
            duration_ms=round((time.monotonic() - started) * 1000, 1),
            **fields,
        )
        raise
    log_event(
        logger,
        logging.DEBUG,
        "report_phase_completed",
        job_id=job_id,
        phase=phase,
        duration_ms=round((time.monotonic() - started) * 1000, 1),
        **fields,
    )
