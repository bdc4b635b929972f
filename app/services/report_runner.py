"""
app/services/report_runner.py

Runs one catalogue job through its three phases.

Phases
------
1. Gather + build: window assembly and metric derivation into definitions.
   A store failure or a malformed definition aborts the job before anything
   is rendered, so there is never a partial publish from this phase.
2. Render: each definition is serialized and handed to the renderer.
   A render failure aborts the job; nothing further is published.
3. Publish: each artifact is sent to the artifacts topic under its key.
   A publish failure is logged and the job moves on; delivery is the
   messaging layer's concern.

Nothing is retried in-process: the next scheduled trigger is the retry.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from pydantic import ValidationError

from app.config import ReportSettings
from app.connectors.publisher import Publisher
from app.connectors.renderer import Renderer
from app.errors import PublishFailureError, RenderFailureError, StoreUnavailableError, UnknownReportJobError
from app.logging_utils import log_event, timed_phase
from app.services.report_builder import ReportBuilder
from app.services.report_catalogue import REPORT_JOBS, BuiltReport, ReportContext, ReportJob
from db.repositories.daily_record_repository import RecordStore

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(tz=timezone.utc).date()


@dataclass
class JobRunResult:
    """
    Outcome of one job run.

    ``error`` is set when the job was aborted in the gather or render phase.
    ``failed_publishes`` lists keys whose artifact the bus did not accept.
    """

    job_id: str
    anchor_day: date
    published: list[str] = field(default_factory=list)
    failed_publishes: list[str] = field(default_factory=list)
    aborted_phase: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None or bool(self.failed_publishes)


class ReportRunner:
    """
    Composes the store, builder, renderer and publisher for catalogue jobs.

    Runs share no mutable state, so different jobs may run concurrently on
    one runner.

    Parameters
    ----------
    store:
        Read-only record store.
    renderer / publisher:
        External collaborators.
    settings:
        Topic, throttle delay and total-region name.
    jobs:
        Catalogue override; defaults to :data:`REPORT_JOBS`.
    sleep / clock:
        Injection points for the throttle delay and the anchor day.
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        renderer: Renderer,
        publisher: Publisher,
        settings: ReportSettings | None = None,
        builder: ReportBuilder | None = None,
        jobs: Mapping[str, ReportJob] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], date] = utc_today,
    ) -> None:
        self._settings = settings or ReportSettings()
        self._renderer = renderer
        self._publisher = publisher
        self._jobs = dict(jobs if jobs is not None else REPORT_JOBS)
        self._sleep = sleep
        self._clock = clock
        self._context = ReportContext(
            store=store,
            builder=builder or ReportBuilder(),
            total_region=self._settings.total_region,
        )

    @property
    def jobs(self) -> Mapping[str, ReportJob]:
        return self._jobs

    def _job(self, job_id: str) -> ReportJob:
        try:
            return self._jobs[job_id]
        except KeyError:
            raise UnknownReportJobError(f"Unknown report job {job_id!r}.") from None

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def build_definitions(self, job_id: str, today: date | None = None) -> list[BuiltReport]:
        """
        Gather and build without rendering or publishing.
        """
        job = self._job(job_id)
        anchor = today or self._clock()
        with timed_phase(logger, job_id=job_id, phase="gather"):
            return job.build(self._context, anchor)

    def run(self, job_id: str, today: date | None = None) -> JobRunResult:
        """
        Run one job to completion or to its first aborting failure.
        """
        job = self._job(job_id)
        anchor = today or self._clock()
        result = JobRunResult(job_id=job_id, anchor_day=anchor)
        log_event(logger, logging.INFO, "report_job_started", job_id=job_id, anchor_day=anchor)

        try:
            reports = self.build_definitions(job_id, anchor)
        except (StoreUnavailableError, ValidationError) as exc:
            return self._abort(result, "gather", exc)

        topic = self._settings.artifacts_topic
        for index, report in enumerate(reports):
            if job.throttled and index > 0 and self._settings.throttle_seconds > 0:
                self._sleep(self._settings.throttle_seconds)

            definition_text = report.definition.to_wire()
            logger.debug("Definition ready job_id=%s key=%s: %s", job_id, report.key, definition_text)
            try:
                with timed_phase(logger, job_id=job_id, phase="render", key=report.key):
                    image = self._renderer.render(definition_text)
            except RenderFailureError as exc:
                return self._abort(result, "render", exc)

            try:
                with timed_phase(logger, job_id=job_id, phase="publish", key=report.key):
                    self._publisher.publish(topic, report.key, image)
            except PublishFailureError:
                result.failed_publishes.append(report.key)
                continue
            result.published.append(report.key)

        log_event(
            logger,
            logging.INFO,
            "report_job_completed",
            job_id=job_id,
            anchor_day=anchor,
            published=len(result.published),
            failed_publishes=result.failed_publishes,
        )
        return result

    @staticmethod
    def _abort(result: JobRunResult, phase: str, exc: Exception) -> JobRunResult:
        result.aborted_phase = phase
        result.error = f"{type(exc).__name__}: {exc}"
        log_event(
            logger,
            logging.ERROR,
            "report_job_aborted",
            job_id=result.job_id,
            anchor_day=result.anchor_day,
            phase=phase,
            published=len(result.published),
            error=result.error,
        )
        return result
