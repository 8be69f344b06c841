"""Beanie ODM document models for MongoDB collections.

This module defines the document models using Beanie ODM, which provides:
- Automatic Pydantic validation
- Built-in async CRUD operations
- Index definitions at the model level

Usage:
    from db.models import ActivityRecord, StatSummary

    # Find an owner's records
    records = await ActivityRecord.find(ActivityRecord.owner_id == "u1").to_list()

    # Read a stored summary
    summary = await StatSummary.find_one(
        StatSummary.owner_id == "u1",
        StatSummary.period_type == "all_time",
    )
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from beanie import Document, Indexed
from pydantic import BaseModel, Field, field_validator, model_validator
from pymongo import ASCENDING, DESCENDING, IndexModel

from date_utils import get_current_utc_time, parse_timestamp


class GeoPoint(BaseModel):
    """Representative point of an activity."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class ActivityRecord(Document):
    """One completed activity, written by the ingestion service.

    The stats engine only reads these documents. ``deleted`` is the soft-delete
    flag; deleted records never contribute to summaries or rankings.
    """

    record_id: Indexed(str, unique=True)
    owner_id: str
    start_time: datetime
    end_time: datetime
    distance: float = Field(ge=0, description="Meters")
    duration: float = Field(ge=0, description="Seconds")
    average_speed: float = Field(default=0.0, ge=0, description="km/h")
    max_speed: float = Field(default=0.0, ge=0, description="km/h")
    area: str | None = None
    area_coverage: float | None = Field(default=None, ge=0, description="m^2")
    centroid: GeoPoint | None = None
    notes: str | None = Field(default=None, max_length=500)
    deleted: bool = False
    created_at: datetime = Field(default_factory=get_current_utc_time)

    @field_validator("start_time", "end_time", "created_at", mode="before")
    @classmethod
    def parse_datetime_fields(cls, v: Any) -> datetime | None:
        """Parse datetime fields using the centralized date_utils."""
        if v is None:
            return None
        return parse_timestamp(v)

    @model_validator(mode="after")
    def check_time_order(self) -> ActivityRecord:
        if self.end_time <= self.start_time:
            msg = "end_time must be after start_time"
            raise ValueError(msg)
        return self

    class Settings:
        name = "activities"
        indexes = [
            IndexModel(
                [
                    ("owner_id", ASCENDING),
                    ("deleted", ASCENDING),
                    ("start_time", DESCENDING),
                ],
                name="activities_owner_deleted_start_idx",
            ),
            IndexModel(
                [("deleted", ASCENDING), ("start_time", DESCENDING)],
                name="activities_deleted_start_idx",
            ),
            IndexModel(
                [("area", ASCENDING)],
                name="activities_area_idx",
                sparse=True,
            ),
        ]


class StatSummary(Document):
    """Aggregate of an owner's activities within one period window.

    ``(owner_id, period_type, period_start)`` is the natural key; the unique
    index guarantees at most one row per key.
    """

    owner_id: str
    period_type: str
    period_start: datetime
    period_end: datetime
    total_distance: float = 0.0
    total_duration: float = 0.0
    total_count: int = 0
    average_speed: float = 0.0
    longest_distance: float = 0.0
    longest_duration: float = 0.0
    fastest_speed: float = 0.0
    updated_at: datetime | None = None

    @field_validator("period_start", "period_end", "updated_at", mode="before")
    @classmethod
    def parse_datetime_fields(cls, v: Any) -> datetime | None:
        if v is None:
            return None
        return parse_timestamp(v)

    class Settings:
        name = "stats"
        indexes = [
            IndexModel(
                [
                    ("owner_id", ASCENDING),
                    ("period_type", ASCENDING),
                    ("period_start", ASCENDING),
                ],
                name="stats_natural_key_unique_idx",
                unique=True,
            ),
            IndexModel(
                [("owner_id", ASCENDING), ("period_type", ASCENDING)],
                name="stats_owner_period_type_idx",
            ),
            IndexModel([("period_start", DESCENDING)], name="stats_period_start_idx"),
        ]


ALL_DOCUMENT_MODELS = [
    ActivityRecord,
    StatSummary,
]
