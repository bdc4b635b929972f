"""
app/services/report_catalogue.py

The fixed set of report jobs.

Each job's ``build`` callable covers the gather and build phases: it reads
the store through the window assembler, derives metrics, and returns the
finished definitions with their publish keys. Rendering and publishing are
left to :class:`app.services.report_runner.ReportRunner`.

Jobs
----
daily_and_total   : last 14 days of the national total: daily bars + cumulative lines
doubling_rate     : last 31 days of the national doubling rate
top_states_trend  : last 31 days of cumulative confirmed for the top five states
history_trend     : cumulative totals since 2020-01-30
testing_trend     : daily tests/positives since 2020-05-15 with moving positivity
statewise_total   : last 62 days of cumulative totals for every state and the total
today / yesterday : states ranked by the day's new confirmed cases
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta

from app.domain.daily_record import DailyRecord
from app.schemas.report_definition import ChartKind, ReportDefinition
from app.services.metric_deriver import (
    cumulative_active,
    display_active,
    doubling_rate,
    has_testing_data,
    record_positivity_series,
    tested_count,
)
from app.services.report_builder import (
    BLUE,
    GREEN,
    GREY,
    LEFT_Y_AXIS,
    RED,
    RIGHT_Y_AXIS,
    SNAPSHOT_RENDER_OPTIONS,
    YELLOW,
    ReportBuilder,
    SeriesSpec,
)
from app.services.window_assembler import (
    cross_region,
    fixed_window,
    full_history,
    month_day_label,
    trailing_days,
)
from db.repositories.daily_record_repository import RecordStore

# ---------------------------------------------------------------------------
# Publish keys
# ---------------------------------------------------------------------------

LAST_SEVEN_DAYS_OVERVIEW = "last7daysoverview"
LAST_TWO_WEEKS_TOTAL = "last2weekstotal"
DOUBLING_RATE = "doublingrate"
STATES_TREND = "top5statestrend"
HISTORY_TREND = "historytrend"
TESTING_TREND = "testingtotal"
STATEWISE_TOTAL_SUFFIX = "-statewisetotal"
TODAY = "today"
YESTERDAY = "yesterday"

# ---------------------------------------------------------------------------
# Windows and regions
# ---------------------------------------------------------------------------

OVERVIEW_DAYS = 14
DOUBLING_RATE_DAYS = 31
STATES_TREND_DAYS = 31
STATEWISE_DAYS = 62

HISTORY_START = date(2020, 1, 30)
TESTING_START = date(2020, 5, 15)

REGIONS: tuple[str, ...] = (
    "Delhi", "Jammu and Kashmir", "Himachal Pradesh", "Chandigarh",
    "Haryana", "Punjab", "Rajasthan", "Ladakh",
    "Chhattisgarh", "Madhya Pradesh", "Uttar Pradesh", "Uttarakhand",
    "Bihar", "Jharkhand", "Odisha", "West Bengal",
    "Arunachal Pradesh", "Assam", "Manipur", "Meghalaya",
    "Mizoram", "Nagaland", "Tripura", "Sikkim",
    "Goa", "Gujarat", "Maharashtra", "Dadra and Nagar Haveli", "Daman and Diu",
    "Andhra Pradesh", "Karnataka", "Kerala", "Puducherry",
    "Tamil Nadu", "Telangana", "Andaman and Nicobar Islands", "Lakshadweep",
)

TOP_STATES: tuple[str, ...] = ("Maharashtra", "Gujarat", "Delhi", "Tamil Nadu", "Rajasthan")


# ---------------------------------------------------------------------------
# Job model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportContext:
    """Read-only collaborators shared by the build phase of every job."""

    store: RecordStore
    builder: ReportBuilder
    total_region: str = "Total"
    regions: tuple[str, ...] = REGIONS


@dataclass(frozen=True)
class BuiltReport:
    """A finished definition and the key it is published under."""

    key: str
    definition: ReportDefinition


@dataclass(frozen=True)
class ReportJob:
    """
    One catalogue entry.

    ``throttled`` jobs pause between successive render+publish cycles so a
    multi-region job does not flood the renderer.
    """

    job_id: str
    name: str
    build: Callable[[ReportContext, date], list[BuiltReport]]
    throttled: bool = False


# ---------------------------------------------------------------------------
# Series
# ---------------------------------------------------------------------------


def _daily_series(kind: ChartKind) -> list[SeriesSpec]:
    return [
        SeriesSpec("Confirmed", RED, kind, lambda r: r.delta_confirmed),
        SeriesSpec("Recovered", GREEN, kind, lambda r: r.delta_recovered),
        SeriesSpec("Deaths", BLUE, kind, lambda r: r.delta_deceased),
    ]


def _cumulative_series(kind: ChartKind) -> list[SeriesSpec]:
    return [
        SeriesSpec("Confirmed", RED, kind, lambda r: r.current_confirmed),
        SeriesSpec("Recovered", GREEN, kind, lambda r: r.current_recovered),
        SeriesSpec("Deaths", BLUE, kind, lambda r: r.current_deceased),
    ]


# ---------------------------------------------------------------------------
# Builds
# ---------------------------------------------------------------------------


def build_daily_and_total(ctx: ReportContext, today: date) -> list[BuiltReport]:
    entries = fixed_window(ctx.store.get, ctx.total_region, today, OVERVIEW_DAYS)
    return [
        BuiltReport(LAST_SEVEN_DAYS_OVERVIEW, ctx.builder.time_series("bar", entries, _daily_series("bar"))),
        BuiltReport(LAST_TWO_WEEKS_TOTAL, ctx.builder.time_series("line", entries, _cumulative_series("line"))),
    ]


def build_doubling_rate(ctx: ReportContext, today: date) -> list[BuiltReport]:
    entries = fixed_window(ctx.store.get, ctx.total_region, today, DOUBLING_RATE_DAYS)
    definition = ctx.builder.time_series(
        "line",
        entries,
        [SeriesSpec("Doubling Rate", RED, "line", doubling_rate)],
        include=lambda record: doubling_rate(record) is not None,
    )
    return [BuiltReport(DOUBLING_RATE, definition)]


def build_top_states_trend(ctx: ReportContext, today: date) -> list[BuiltReport]:
    entries = cross_region(ctx.store.scan_all, TOP_STATES, trailing_days(today, STATES_TREND_DAYS))
    definition = ctx.builder.multi_region(
        "line",
        entries,
        TOP_STATES,
        lambda record: record.current_confirmed,
    )
    return [BuiltReport(STATES_TREND, definition)]


def build_history_trend(ctx: ReportContext, today: date) -> list[BuiltReport]:
    entries = full_history(ctx.store.get, ctx.total_region, HISTORY_START, today)
    definition = ctx.builder.time_series(
        "line",
        entries,
        [
            SeriesSpec("Total Cases", BLUE, "line", lambda r: r.current_confirmed),
            SeriesSpec("Active", YELLOW, "line", cumulative_active),
            SeriesSpec("Recovered", GREEN, "line", lambda r: r.current_recovered),
            SeriesSpec("Deceased", RED, "line", lambda r: r.current_deceased),
        ],
    )
    return [BuiltReport(HISTORY_TREND, definition)]


def build_testing_trend(ctx: ReportContext, today: date) -> list[BuiltReport]:
    entries = full_history(ctx.store.get, ctx.total_region, TESTING_START, today)
    # The moving average runs over every day, including the ones the chart drops.
    moving_positivity = record_positivity_series(entry.record for entry in entries)
    by_day = {entry.day: mean for entry, mean in zip(entries, moving_positivity)}

    definition = ctx.builder.time_series(
        "bar",
        entries,
        [
            SeriesSpec("Positive", RED, "bar", lambda r: r.delta_confirmed, axis_id=LEFT_Y_AXIS.id),
            SeriesSpec("Tested", GREEN, "bar", tested_count, axis_id=LEFT_Y_AXIS.id),
            SeriesSpec(
                "5-day Moving Positivity rate",
                BLUE,
                "line",
                axis_id=RIGHT_Y_AXIS.id,
                precomputed=by_day,
            ),
        ],
        include=has_testing_data,
        y_axes=(LEFT_Y_AXIS, RIGHT_Y_AXIS),
    )
    return [BuiltReport(TESTING_TREND, definition)]


def build_statewise_total(ctx: ReportContext, today: date) -> list[BuiltReport]:
    specs = [
        SeriesSpec("Active", GREY, "bar", cumulative_active),
        SeriesSpec("Deaths", RED, "bar", lambda r: r.current_deceased),
        SeriesSpec("Recovered", BLUE, "bar", lambda r: r.current_recovered),
    ]
    reports: list[BuiltReport] = []
    for region in (*ctx.regions, ctx.total_region):
        entries = fixed_window(ctx.store.get, region, today, STATEWISE_DAYS)
        reports.append(
            BuiltReport(f"{region}{STATEWISE_TOTAL_SUFFIX}", ctx.builder.time_series("bar", entries, specs))
        )
    return reports


def _snapshot(ctx: ReportContext, day: date) -> ReportDefinition:
    records: list[DailyRecord | None] = [ctx.store.get(region, day) for region in ctx.regions]
    return ctx.builder.ranking(
        "horizontalBar",
        records,
        [
            SeriesSpec("Active", GREY, "horizontalBar", display_active),
            SeriesSpec("Recovered", BLUE, "horizontalBar", lambda r: r.delta_recovered),
            SeriesSpec("Deaths", RED, "horizontalBar", lambda r: r.delta_deceased),
        ],
        sort_key=lambda record: record.delta_confirmed,
        title=month_day_label(day),
        options=SNAPSHOT_RENDER_OPTIONS,
    )


def build_today(ctx: ReportContext, today: date) -> list[BuiltReport]:
    return [BuiltReport(TODAY, _snapshot(ctx, today))]


def build_yesterday(ctx: ReportContext, today: date) -> list[BuiltReport]:
    return [BuiltReport(YESTERDAY, _snapshot(ctx, today - timedelta(days=1)))]


REPORT_JOBS: dict[str, ReportJob] = {
    job.job_id: job
    for job in (
        ReportJob("daily_and_total", "Daily and cumulative overview", build_daily_and_total),
        ReportJob("doubling_rate", "Doubling rate", build_doubling_rate),
        ReportJob("top_states_trend", "Top states trend", build_top_states_trend),
        ReportJob("history_trend", "History trend", build_history_trend),
        ReportJob("testing_trend", "Testing trend", build_testing_trend),
        ReportJob("statewise_total", "Statewise totals", build_statewise_total, throttled=True),
        ReportJob("today", "Today's state ranking", build_today),
        ReportJob("yesterday", "Yesterday's state ranking", build_yesterday),
    )
}
