"""
app/schemas package marker.
"""

from app.schemas.report_definition import (
    Axis,
    ChartData,
    Dataset,
    ReportDefinition,
    Scales,
    Tick,
)

__all__ = [
    "Axis",
    "ChartData",
    "Dataset",
    "ReportDefinition",
    "Scales",
    "Tick",
]
