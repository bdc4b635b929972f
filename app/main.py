from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    scheduler_running: bool
    jobs: int


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Runs before any database connection or HTTP client is initialised.
    Raises RuntimeError listing every missing variable so the operator can
    fix all problems in one restart cycle.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Record store ---------------------------------------------------
    if not any(
        os.getenv(name, "").strip()
        for name in (
            "RECORDS_READ_REPLICA_URL",
            "DATABASE_URL",
            "CLOUD_DATABASE_URL",
            "LOCAL_DATABASE_URL",
        )
    ):
        errors.append(
            "No database URL configured. Set RECORDS_READ_REPLICA_URL or DATABASE_URL."
        )

    # --- Collaborators --------------------------------------------------
    if not os.getenv("RENDERER_URL", "").strip():
        errors.append("RENDERER_URL is not set. Charts cannot be rendered without it.")
    if not os.getenv("PUBLISHER_BASE_URL", "").strip():
        errors.append("PUBLISHER_BASE_URL is not set. Artifacts cannot be published without it.")

    if errors:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # APScheduler logs every job submission at INFO.
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and start the report scheduler on boot; shut it down on exit."""
    log = logging.getLogger(__name__)
    _check_db()
    log.info("Database connectivity confirmed")

    from app.config import get_report_settings
    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    application.state.scheduler = scheduler
    if get_report_settings().scheduler_enabled:
        scheduler.start()
        log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    else:
        log.warning("Scheduler disabled by REPORT_SCHEDULER_ENABLED; on-demand runs only")
    try:
        yield
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=True)
            log.info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Chart Report Service",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import report_router

    application.include_router(report_router)

    @application.get("/health")
    def healthcheck() -> HealthResponse:
        scheduler = getattr(application.state, "scheduler", None)
        running = bool(scheduler is not None and scheduler.running)
        return HealthResponse(
            status="ok",
            scheduler_running=running,
            jobs=len(scheduler.get_jobs()) if scheduler is not None else 0,
        )

    return application


app = create_app()
