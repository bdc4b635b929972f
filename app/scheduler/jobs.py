"""
app/scheduler/jobs.py

APScheduler-based scheduler for the chart report jobs.

Schedule (all times UTC)
--------------------------
  daily_and_total   : 00:00 every day
  doubling_rate     : 00:02 every day
  top_states_trend  : 00:03 every day
  history_trend     : 00:04 every day
  testing_trend     : 00:05 every day
  statewise_total   : 00:06 every day
  yesterday         : 00:10 every day
  today             : every 15 minutes from :02, 04:00-19:59

Start times are staggered so the renderer never sees every job at once.
Each trigger is a declarative :class:`ReportTrigger`; changing a schedule
means editing :data:`REPORT_TRIGGERS`, not the job code.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_publisher_settings, get_renderer_settings, get_report_settings
from app.connectors.publisher import HTTPPublisher
from app.connectors.renderer import HTTPRenderer
from app.services.report_runner import ReportRunner
from db.repositories.daily_record_repository import SQLAlchemyRecordStore
from db.session import SessionLocal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportTrigger:
    """
    Calendar trigger for one catalogue job.

    ``hour`` and ``minute`` accept anything APScheduler's cron trigger does
    (``0``, ``"4-19"``, ``"2/15"``).
    """

    job_id: str
    name: str
    hour: int | str
    minute: int | str
    misfire_grace_time: int = 3600

    def cron_fields(self) -> dict[str, Any]:
        return {"hour": self.hour, "minute": self.minute}


REPORT_TRIGGERS: tuple[ReportTrigger, ...] = (
    ReportTrigger("daily_and_total", "Daily and cumulative overview charts", hour=0, minute=0),
    ReportTrigger("doubling_rate", "Doubling rate chart", hour=0, minute=2),
    ReportTrigger("top_states_trend", "Top states trend chart", hour=0, minute=3),
    ReportTrigger("history_trend", "History trend chart", hour=0, minute=4),
    ReportTrigger("testing_trend", "Testing trend chart", hour=0, minute=5),
    ReportTrigger("statewise_total", "Statewise total charts", hour=0, minute=6),
    ReportTrigger("yesterday", "Yesterday's state ranking chart", hour=0, minute=10),
    ReportTrigger("today", "Today's state ranking chart", hour="4-19", minute="2/15", misfire_grace_time=600),
)


# ---------------------------------------------------------------------------
# Runner wiring
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_report_runner() -> ReportRunner:
    """
    Return the process-wide runner backed by the database and HTTP collaborators.
    """
    return ReportRunner(
        store=SQLAlchemyRecordStore(SessionLocal),
        renderer=HTTPRenderer.from_settings(get_renderer_settings()),
        publisher=HTTPPublisher.from_settings(get_publisher_settings()),
        settings=get_report_settings(),
    )


def run_report_job(job_id: str, runner: ReportRunner | None = None) -> None:
    """
    Scheduler entry point for one trigger firing.

    Failures are logged and swallowed so the scheduler thread survives; the
    next trigger is the retry.
    """
    logger.info("Scheduler: %s starting", job_id)
    try:
        result = (runner or get_report_runner()).run(job_id)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Scheduler: %s failed: %s", job_id, exc)
        return

    if result.failed:
        logger.warning(
            "Scheduler: %s finished with failures phase=%s error=%s failed_publishes=%s",
            job_id,
            result.aborted_phase,
            result.error,
            result.failed_publishes,
        )
    else:
        logger.info("Scheduler: %s complete published=%d", job_id, len(result.published))


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(
    runner: ReportRunner | None = None,
    triggers: tuple[ReportTrigger, ...] = REPORT_TRIGGERS,
) -> BackgroundScheduler:
    """
    Build and register one cron job per trigger.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.

    ``max_instances=1`` keeps a job from overlapping itself; different jobs
    still run concurrently on the scheduler's thread pool.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    for trigger in triggers:
        scheduler.add_job(
            run_report_job,
            trigger="cron",
            args=[trigger.job_id],
            kwargs={"runner": runner},
            id=trigger.job_id,
            name=trigger.name,
            replace_existing=True,
            misfire_grace_time=trigger.misfire_grace_time,
            max_instances=1,
            coalesce=True,
            **trigger.cron_fields(),
        )

    return scheduler
