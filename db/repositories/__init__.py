"""
Repository layer exports.
"""

from db.repositories.daily_record_repository import RecordStore, SQLAlchemyRecordStore

__all__ = [
    "RecordStore",
    "SQLAlchemyRecordStore",
]
