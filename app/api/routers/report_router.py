"""
app/api/routers/report_router.py

Operator endpoints for the report catalogue.

Listing shows each job with its calendar trigger. Running a job on demand
goes through the same gather/render/publish phases as a scheduled firing;
a failed run is still answered with 200 and the failure in the body.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.errors import UnknownReportJobError
from app.scheduler.jobs import REPORT_TRIGGERS, get_report_runner
from app.schemas.report_jobs import JobRunResponse, ReportJobListResponse, ReportJobResponse
from app.services.report_runner import ReportRunner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get(
    "/jobs",
    response_model=ReportJobListResponse,
    status_code=status.HTTP_200_OK,
)
def list_report_jobs(runner: ReportRunner = Depends(get_report_runner)) -> ReportJobListResponse:
    triggers = {trigger.job_id: trigger for trigger in REPORT_TRIGGERS}
    jobs = [
        ReportJobResponse(
            job_id=job.job_id,
            name=job.name,
            throttled=job.throttled,
            hour=str(triggers[job.job_id].hour) if job.job_id in triggers else "",
            minute=str(triggers[job.job_id].minute) if job.job_id in triggers else "",
        )
        for job in runner.jobs.values()
    ]
    return ReportJobListResponse(jobs=jobs)


@router.post(
    "/jobs/{job_id}/run",
    response_model=JobRunResponse,
    status_code=status.HTTP_200_OK,
)
def run_report_job_now(
    job_id: str,
    day: date | None = Query(default=None, description="Anchor day (UTC); defaults to today"),
    runner: ReportRunner = Depends(get_report_runner),
) -> JobRunResponse:
    """
    Run one catalogue job immediately.
    """
    try:
        result = runner.run(job_id, today=day)
    except UnknownReportJobError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    logger.info("On-demand run job_id=%s failed=%s", job_id, result.failed)
    return JobRunResponse.from_result(result)
