from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from app.schemas.report_definition import (
    Axis,
    ChartData,
    Dataset,
    ReportDefinition,
    Scales,
    Tick,
)


def _scales() -> Scales:
    return Scales(
        x=[Axis(id="bottom-x-axis", position="bottom")],
        y=[
            Axis(id="left-y-axis", position="left"),
            Axis(id="right-y-axis", position="right", display=False, ticks=Tick()),
        ],
    )


def _dataset(values: list[float], axis_id: str | None = None) -> Dataset:
    return Dataset(kind="bar", label="Confirmed", values=values, color="rgb(255, 99, 132)", axis_id=axis_id)


class TestChartData:
    def test_misaligned_dataset_rejected(self) -> None:
        with pytest.raises(ValidationError, match="has 1 values for 2 labels"):
            ChartData(labels=["Jun 01", "Jun 02"], datasets=[_dataset([1.0])])

    def test_aligned_dataset_accepted(self) -> None:
        data = ChartData(labels=["Jun 01"], datasets=[_dataset([1.0])])
        assert data.datasets[0].values == [1.0]


class TestReportDefinition:
    def test_unknown_axis_binding_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unknown axis"):
            ReportDefinition(
                kind="bar",
                data=ChartData(labels=["Jun 01"], datasets=[_dataset([1.0], axis_id="middle-axis")]),
                scales=_scales(),
            )

    def test_non_positive_canvas_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ReportDefinition(
                kind="bar",
                data=ChartData(labels=[], datasets=[]),
                scales=_scales(),
                width=0,
            )

    def test_wire_uses_camel_case_and_omits_unset(self) -> None:
        definition = ReportDefinition(
            kind="bar",
            data=ChartData(labels=["Jun 01"], datasets=[_dataset([1.0], axis_id="left-y-axis")]),
            scales=_scales(),
            background_color="transparent",
            image_format="png",
        )

        wire = json.loads(definition.to_wire())

        assert wire["backgroundColor"] == "transparent"
        assert wire["format"] == "png"
        assert "width" not in wire
        assert "title" not in wire
        assert wire["data"]["datasets"][0]["axisId"] == "left-y-axis"
        assert wire["scales"]["y"][1]["ticks"] == {"beginAtZero": True}
        assert "ticks" not in wire["scales"]["y"][0]

    def test_dataset_without_axis_omits_binding(self) -> None:
        definition = ReportDefinition(
            kind="line",
            data=ChartData(labels=["Jun 01"], datasets=[_dataset([2.0])]),
            scales=_scales(),
        )

        dataset = json.loads(definition.to_wire())["data"]["datasets"][0]

        assert "axisId" not in dataset
        assert dataset == {"kind": "bar", "label": "Confirmed", "values": [2.0], "color": "rgb(255, 99, 132)"}

    def test_extra_fields_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Axis(id="x", position="bottom", stacked=True)

    def test_accepts_wire_aliases(self) -> None:
        definition = ReportDefinition.model_validate(
            {
                "kind": "horizontalBar",
                "data": {"labels": [], "datasets": []},
                "scales": {"x": [], "y": []},
                "backgroundColor": "transparent",
                "format": "png",
            }
        )
        assert definition.background_color == "transparent"
        assert definition.image_format == "png"
