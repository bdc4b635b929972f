"""
tests/test_report_builder.py

Definition assembly: label/dataset alignment, ranking and multi-region charts.
"""

from __future__ import annotations

from datetime import date

import pytest

from app.services.report_builder import (
    BLUE,
    BOTTOM_X_AXIS,
    GREEN,
    LEFT_Y_AXIS,
    RED,
    SERIES_PALETTE,
    SNAPSHOT_RENDER_OPTIONS,
    ReportBuilder,
    SeriesSpec,
)
from app.services.window_assembler import CrossRegionEntry, WindowEntry, month_day_label
from report_fakes import make_record


def _entry(day: date, record) -> WindowEntry:
    return WindowEntry(label=month_day_label(day), day=day, record=record)


@pytest.fixture
def builder() -> ReportBuilder:
    return ReportBuilder()


@pytest.fixture
def confirmed_spec() -> SeriesSpec:
    return SeriesSpec("Confirmed", RED, "bar", lambda r: r.delta_confirmed)


class TestTimeSeries:
    def test_absent_days_dropped_from_labels_and_every_dataset(self, builder: ReportBuilder) -> None:
        days = [date(2020, 6, d) for d in (1, 2, 3)]
        entries = [
            _entry(days[0], make_record(day=days[0], confirmed=5, recovered=1)),
            _entry(days[1], None),
            _entry(days[2], make_record(day=days[2], confirmed=7, recovered=2)),
        ]
        specs = [
            SeriesSpec("Confirmed", RED, "bar", lambda r: r.delta_confirmed),
            SeriesSpec("Recovered", GREEN, "bar", lambda r: r.delta_recovered),
        ]

        definition = builder.time_series("bar", entries, specs)

        assert definition.data.labels == ["Jun 01", "Jun 03"]
        assert [ds.values for ds in definition.data.datasets] == [[5.0, 7.0], [1.0, 2.0]]
        assert [ds.label for ds in definition.data.datasets] == ["Confirmed", "Recovered"]

    def test_include_filter_drops_rejected_days(self, builder: ReportBuilder, confirmed_spec: SeriesSpec) -> None:
        days = [date(2020, 6, d) for d in (1, 2)]
        entries = [
            _entry(days[0], make_record(day=days[0], confirmed=5)),
            _entry(days[1], make_record(day=days[1], confirmed=0)),
        ]

        definition = builder.time_series(
            "bar", entries, [confirmed_spec], include=lambda r: r.delta_confirmed > 0
        )

        assert definition.data.labels == ["Jun 01"]
        assert definition.data.datasets[0].values == [5.0]

    def test_all_absent_gives_empty_chart(self, builder: ReportBuilder, confirmed_spec: SeriesSpec) -> None:
        definition = builder.time_series("bar", [_entry(date(2020, 6, 1), None)], [confirmed_spec])

        assert definition.data.labels == []
        assert definition.data.datasets[0].values == []

    def test_default_axes_and_no_canvas_options(self, builder: ReportBuilder, confirmed_spec: SeriesSpec) -> None:
        definition = builder.time_series("line", [], [confirmed_spec])

        assert definition.scales.x == [BOTTOM_X_AXIS]
        assert definition.scales.y == [LEFT_Y_AXIS]
        assert definition.width is None
        assert definition.title is None

    def test_precomputed_series_read_by_day(self, builder: ReportBuilder) -> None:
        day = date(2020, 6, 1)
        spec = SeriesSpec("Rate", BLUE, "line", precomputed={day: 11.66666})

        definition = builder.time_series("line", [_entry(day, make_record(day=day))], [spec])

        assert definition.data.datasets[0].values == [11.67]

    def test_spec_without_metric_or_values_rejected(self, builder: ReportBuilder) -> None:
        day = date(2020, 6, 1)
        with pytest.raises(ValueError, match="neither a metric"):
            builder.time_series("line", [_entry(day, make_record(day=day))], [SeriesSpec("Empty", RED, "line")])

    def test_points_skip_absent_days(self, confirmed_spec: SeriesSpec) -> None:
        day1, day2 = date(2020, 6, 1), date(2020, 6, 2)
        points = ReportBuilder.points(
            [_entry(day1, None), _entry(day2, make_record(day=day2, confirmed=3))], confirmed_spec
        )

        assert [(p.label, p.value) for p in points] == [("Jun 02", 3.0)]


class TestRanking:
    def test_filters_and_sorts_descending(self, builder: ReportBuilder, confirmed_spec: SeriesSpec) -> None:
        records = [
            make_record("B", confirmed=-5, recovered=3),
            make_record("A", confirmed=50, recovered=10),
            make_record("C"),
            None,
            make_record("D", confirmed=80),
        ]

        definition = builder.ranking(
            "horizontalBar", records, [confirmed_spec], sort_key=lambda r: r.delta_confirmed
        )

        assert definition.data.labels == ["D", "A"]
        assert definition.data.datasets[0].values == [80.0, 50.0]

    def test_only_valid_region_survives(self, builder: ReportBuilder, confirmed_spec: SeriesSpec) -> None:
        records = [
            make_record("A", confirmed=50),
            make_record("B", confirmed=-5),
            make_record("C"),
        ]

        definition = builder.ranking(
            "horizontalBar", records, [confirmed_spec], sort_key=lambda r: r.delta_confirmed
        )

        assert definition.data.labels == ["A"]

    def test_ties_keep_input_order(self, builder: ReportBuilder, confirmed_spec: SeriesSpec) -> None:
        records = [
            make_record("First", confirmed=10),
            make_record("Big", confirmed=20),
            make_record("Second", confirmed=10),
        ]

        definition = builder.ranking(
            "horizontalBar", records, [confirmed_spec], sort_key=lambda r: r.delta_confirmed
        )

        assert definition.data.labels == ["Big", "First", "Second"]

    def test_title_and_canvas_options(self, builder: ReportBuilder, confirmed_spec: SeriesSpec) -> None:
        definition = builder.ranking(
            "horizontalBar",
            [make_record("A", confirmed=1)],
            [confirmed_spec],
            sort_key=lambda r: r.delta_confirmed,
            title="Jun 01",
            options=SNAPSHOT_RENDER_OPTIONS,
        )

        assert definition.title == "Jun 01"
        assert definition.background_color == "transparent"
        assert (definition.width, definition.height) == (1000, 600)
        assert definition.image_format == "png"


class TestMultiRegion:
    def test_datasets_follow_whitelist_order(self, builder: ReportBuilder) -> None:
        day1, day2 = date(2020, 6, 1), date(2020, 6, 2)
        entries = [
            CrossRegionEntry(
                "Jun 01",
                day1,
                {
                    "Gujarat": make_record("Gujarat", day1, total_confirmed=5),
                    "Delhi": make_record("Delhi", day1, total_confirmed=3),
                },
            ),
            CrossRegionEntry(
                "Jun 02",
                day2,
                {
                    "Delhi": make_record("Delhi", day2, total_confirmed=4),
                    "Gujarat": make_record("Gujarat", day2, total_confirmed=6),
                },
            ),
        ]

        definition = builder.multi_region(
            "line", entries, ["Delhi", "Gujarat", "Goa"], lambda r: r.current_confirmed
        )

        assert definition.data.labels == ["Jun 01", "Jun 02"]
        assert [ds.label for ds in definition.data.datasets] == ["Delhi", "Gujarat"]
        assert definition.data.datasets[0].values == [3.0, 4.0]
        assert definition.data.datasets[1].values == [5.0, 6.0]
        assert [ds.color for ds in definition.data.datasets] == list(SERIES_PALETTE[:2])

    def test_day_missing_a_charted_region_dropped(self, builder: ReportBuilder) -> None:
        day1, day2 = date(2020, 6, 1), date(2020, 6, 2)
        entries = [
            CrossRegionEntry("Jun 01", day1, {"Delhi": make_record("Delhi", day1, total_confirmed=3)}),
            CrossRegionEntry(
                "Jun 02",
                day2,
                {
                    "Delhi": make_record("Delhi", day2, total_confirmed=4),
                    "Gujarat": make_record("Gujarat", day2, total_confirmed=6),
                },
            ),
        ]

        definition = builder.multi_region("line", entries, ["Delhi", "Gujarat"], lambda r: r.current_confirmed)

        assert definition.data.labels == ["Jun 02"]
        assert all(len(ds.values) == 1 for ds in definition.data.datasets)
