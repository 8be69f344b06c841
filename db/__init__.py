"""Database package for MongoDB operations using Beanie ODM.

Modules:
    manager: DatabaseManager for connection handling
    models: Beanie Document models for the activities and stats collections
    schemas: Non-persisted Pydantic shapes (bounding box, pagination, rankings)
    operations: Retry wrapper for reads and writes
    aggregation: Aggregation pipeline helpers

Usage:
    from db.models import ActivityRecord, StatSummary

    # Find an owner's live records
    records = await ActivityRecord.find(
        ActivityRecord.owner_id == "u1",
        ActivityRecord.deleted == False,
    ).to_list()
"""

from db.aggregation import aggregate_to_list
from db.manager import DatabaseManager
from db.models import ALL_DOCUMENT_MODELS, ActivityRecord, GeoPoint, StatSummary
from db.operations import execute_with_retry
from db.schemas import BoundingBox, LeaderboardEntry, LeaderboardPage, Pagination

__all__ = [
    "ALL_DOCUMENT_MODELS",
    "ActivityRecord",
    "BoundingBox",
    "DatabaseManager",
    "GeoPoint",
    "LeaderboardEntry",
    "LeaderboardPage",
    "Pagination",
    "StatSummary",
    "aggregate_to_list",
    "execute_with_retry",
]
