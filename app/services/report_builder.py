"""
app/services/report_builder.py

Turns assembled windows into renderer-ready report definitions.

Alignment rule
--------------
A day (or region) whose record is absent, or rejected by the report's
filter, is dropped from the label axis and from every dataset in the same
step. Datasets therefore always have exactly one value per label and no
placeholder values ever reach the renderer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date

from app.domain.daily_record import DailyRecord, SeriesPoint
from app.schemas.report_definition import (
    Axis,
    ChartData,
    ChartKind,
    Dataset,
    ReportDefinition,
    Scales,
    Tick,
)
from app.services.metric_deriver import display_value, is_rankable
from app.services.window_assembler import CrossRegionEntry, WindowEntry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Styling constants
# ---------------------------------------------------------------------------

BLUE = "rgb(54, 162, 235)"
RED = "rgb(255, 99, 132)"
GREEN = "rgb(75, 192, 192)"
ORANGE = "rgb(255, 159, 64)"
YELLOW = "rgb(255, 205, 86)"
PURPLE = "rgb(153, 102, 255)"
GREY = "rgb(201, 203, 207)"

SERIES_PALETTE: tuple[str, ...] = (RED, YELLOW, GREEN, BLUE, ORANGE, PURPLE)

BOTTOM_X_AXIS = Axis(id="bottom-x-axis", position="bottom", display=True)
LEFT_Y_AXIS = Axis(id="left-y-axis", position="left", display=True)
RIGHT_Y_AXIS = Axis(id="right-y-axis", position="right", display=False, ticks=Tick(begin_at_zero=True))


@dataclass(frozen=True)
class RenderOptions:
    """Optional canvas overrides forwarded to the renderer."""

    background_color: str | None = None
    width: int | None = None
    height: int | None = None
    image_format: str | None = None


SNAPSHOT_RENDER_OPTIONS = RenderOptions(
    background_color="transparent",
    width=1000,
    height=600,
    image_format="png",
)


@dataclass(frozen=True)
class SeriesSpec:
    """
    Declarative description of one dataset.

    ``metric`` reads the value from a record. When ``precomputed`` is set the
    value is looked up by day instead, for series whose state spans the whole
    window (moving averages).
    """

    name: str
    color: str
    kind: ChartKind
    metric: Callable[[DailyRecord], float | None] | None = None
    axis_id: str | None = None
    precomputed: Mapping[date, float] | None = None

    def value_for(self, record: DailyRecord, day: date) -> float:
        if self.precomputed is not None:
            return display_value(self.precomputed.get(day))
        if self.metric is None:
            raise ValueError(f"series {self.name!r} has neither a metric nor precomputed values")
        return display_value(self.metric(record))


class ReportBuilder:
    """
    Assembles :class:`ReportDefinition` objects from window output.

    Stateless; one instance can serve every job.
    """

    def __init__(
        self,
        *,
        x_axes: Sequence[Axis] = (BOTTOM_X_AXIS,),
        y_axes: Sequence[Axis] = (LEFT_Y_AXIS,),
    ) -> None:
        self._x_axes = list(x_axes)
        self._y_axes = list(y_axes)

    # ------------------------------------------------------------------
    # Date-axis reports
    # ------------------------------------------------------------------

    def time_series(
        self,
        kind: ChartKind,
        entries: Sequence[WindowEntry],
        specs: Sequence[SeriesSpec],
        *,
        include: Callable[[DailyRecord], bool] | None = None,
        y_axes: Sequence[Axis] | None = None,
        title: str | None = None,
        options: RenderOptions | None = None,
    ) -> ReportDefinition:
        """
        One dataset per :class:`SeriesSpec` over the days whose record is present and,
        when ``include`` is given, accepted by it.
        """
        kept = [
            entry
            for entry in entries
            if entry.record is not None and (include is None or include(entry.record))
        ]
        dropped = len(entries) - len(kept)
        if dropped:
            logger.debug("Dropped %d of %d days with no usable record", dropped, len(entries))

        datasets = [
            self._dataset(spec, [point.value for point in self.points(kept, spec)])
            for spec in specs
        ]
        return self._definition(
            kind,
            labels=[entry.label for entry in kept],
            datasets=datasets,
            y_axes=y_axes,
            title=title,
            options=options,
        )

    @staticmethod
    def points(entries: Sequence[WindowEntry], spec: SeriesSpec) -> list[SeriesPoint]:
        """Labelled display values of one series; absent days are skipped."""
        return [
            SeriesPoint(label=entry.label, value=spec.value_for(entry.record, entry.day))
            for entry in entries
            if entry.record is not None
        ]

    # ------------------------------------------------------------------
    # Region-axis reports
    # ------------------------------------------------------------------

    def ranking(
        self,
        kind: ChartKind,
        records: Sequence[DailyRecord | None],
        specs: Sequence[SeriesSpec],
        *,
        sort_key: Callable[[DailyRecord], float],
        title: str | None = None,
        options: RenderOptions | None = None,
    ) -> ReportDefinition:
        """
        Rank regions descending by ``sort_key``.

        Absent, negative and not-yet-updated records are dropped first.
        Ties keep their input order.
        """
        ranked = sorted(
            (record for record in records if is_rankable(record)),
            key=sort_key,
            reverse=True,
        )
        datasets = [
            self._dataset(spec, [spec.value_for(record, record.record_date) for record in ranked])
            for spec in specs
        ]
        return self._definition(
            kind,
            labels=[record.region for record in ranked],
            datasets=datasets,
            title=title,
            options=options,
        )

    def multi_region(
        self,
        kind: ChartKind,
        entries: Sequence[CrossRegionEntry],
        regions: Sequence[str],
        metric: Callable[[DailyRecord], float | None],
        *,
        palette: Sequence[str] = SERIES_PALETTE,
        title: str | None = None,
    ) -> ReportDefinition:
        """
        One dataset per region over a shared date axis.

        Regions that never appear in the window get no dataset. A day is
        kept only when every charted region has a record for it.
        """
        charted = [region for region in regions if any(region in entry.records for entry in entries)]
        kept = [entry for entry in entries if all(region in entry.records for region in charted)]

        datasets = [
            Dataset(
                kind=kind,
                label=region,
                values=[display_value(metric(entry.records[region])) for entry in kept],
                color=palette[index % len(palette)],
            )
            for index, region in enumerate(charted)
        ]
        return self._definition(
            kind,
            labels=[entry.label for entry in kept],
            datasets=datasets,
            title=title,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _dataset(spec: SeriesSpec, values: list[float]) -> Dataset:
        return Dataset(
            kind=spec.kind,
            label=spec.name,
            values=values,
            color=spec.color,
            axis_id=spec.axis_id,
        )

    def _definition(
        self,
        kind: ChartKind,
        *,
        labels: list[str],
        datasets: list[Dataset],
        y_axes: Sequence[Axis] | None = None,
        title: str | None = None,
        options: RenderOptions | None = None,
    ) -> ReportDefinition:
        options = options or RenderOptions()
        return ReportDefinition(
            kind=kind,
            data=ChartData(labels=labels, datasets=datasets),
            scales=Scales(x=list(self._x_axes), y=list(y_axes) if y_axes is not None else list(self._y_axes)),
            title=title,
            background_color=options.background_color,
            width=options.width,
            height=options.height,
            image_format=options.image_format,
        )
