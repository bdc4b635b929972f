"""
app/schemas/report_jobs.py

Response schemas for the report job endpoints.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from app.services.report_runner import JobRunResult


class ReportJobResponse(BaseModel):
    """
    One catalogue entry with its calendar trigger.
    """

    job_id: str
    name: str
    throttled: bool
    hour: str
    minute: str


class ReportJobListResponse(BaseModel):
    jobs: list[ReportJobResponse]


class JobRunResponse(BaseModel):
    """
    Outcome of an on-demand job run.
    """

    job_id: str
    anchor_day: date
    published: list[str] = Field(default_factory=list)
    failed_publishes: list[str] = Field(default_factory=list)
    aborted_phase: str | None = None
    error: str | None = None
    failed: bool

    @classmethod
    def from_result(cls, result: JobRunResult) -> "JobRunResponse":
        return cls(
            job_id=result.job_id,
            anchor_day=result.anchor_day,
            published=list(result.published),
            failed_publishes=list(result.failed_publishes),
            aborted_phase=result.aborted_phase,
            error=result.error,
            failed=result.failed,
        )
