"""
app/domain package marker.
"""

from app.domain.daily_record import DailyRecord, SeriesPoint

__all__ = [
    "DailyRecord",
    "SeriesPoint",
]
