"""
app/schemas/report_definition.py

Renderer-ready report definition and its wire encoding.

Wire shape (camelCase keys, ``None`` fields omitted)::

    {
        "kind": "bar",
        "data": {
            "labels": ["Jan 30", ...],
            "datasets": [
                {"kind": "bar", "label": "Confirmed", "values": [1.0, ...],
                 "color": "rgb(255, 99, 132)", "axisId": "left-y-axis"}
            ]
        },
        "scales": {
            "x": [{"id": "bottom-x-axis", "position": "bottom", "display": true}],
            "y": [{"id": "left-y-axis", "position": "left", "display": true}]
        },
        "title": "Jan 30",
        "backgroundColor": "transparent", "width": 1000, "height": 600, "format": "png"
    }
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ChartKind = Literal["bar", "line", "horizontalBar"]
AxisPosition = Literal["top", "bottom", "left", "right"]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )


class Tick(_WireModel):
    begin_at_zero: bool = Field(default=True, alias="beginAtZero")


class Axis(_WireModel):
    id: str = Field(min_length=1)
    position: AxisPosition
    display: bool = True
    ticks: Tick | None = None


class Dataset(_WireModel):
    """
    One named, coloured series aligned positionally with the label axis.
    """

    kind: ChartKind
    label: str
    values: list[float]
    color: str
    axis_id: str | None = Field(default=None, alias="axisId")


class ChartData(_WireModel):
    labels: list[str]
    datasets: list[Dataset]

    @model_validator(mode="after")
    def _datasets_aligned(self) -> "ChartData":
        expected = len(self.labels)
        for dataset in self.datasets:
            if len(dataset.values) != expected:
                raise ValueError(
                    f"dataset {dataset.label!r} has {len(dataset.values)} values "
                    f"for {expected} labels"
                )
        return self


class Scales(_WireModel):
    x: list[Axis]
    y: list[Axis]


class ReportDefinition(_WireModel):
    """
    Complete description of one chart, handed to the renderer as JSON text.
    """

    kind: ChartKind
    data: ChartData
    scales: Scales
    title: str | None = None
    background_color: str | None = Field(default=None, alias="backgroundColor")
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    image_format: str | None = Field(default=None, alias="format")

    @model_validator(mode="after")
    def _axis_bindings_resolve(self) -> "ReportDefinition":
        axis_ids = {axis.id for axis in self.scales.x} | {axis.id for axis in self.scales.y}
        for dataset in self.data.datasets:
            if dataset.axis_id is not None and dataset.axis_id not in axis_ids:
                raise ValueError(f"dataset {dataset.label!r} binds unknown axis {dataset.axis_id!r}")
        return self

    def to_wire(self) -> str:
        """Deterministic JSON text for the renderer."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
