"""
Pydantic schemas for request validation and API responses.

This module contains Pydantic models used across the application that are not
persisted, separating API-specific shapes from Beanie database documents.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class BoundingBox(BaseModel):
    """Axis-aligned latitude/longitude rectangle.

    ``min_lng > max_lng`` (a box crossing the antimeridian) is accepted but
    matches nothing.
    """

    min_lat: float = Field(ge=-90, le=90)
    max_lat: float = Field(ge=-90, le=90)
    min_lng: float = Field(ge=-180, le=180)
    max_lng: float = Field(ge=-180, le=180)

    @model_validator(mode="after")
    def check_latitude_order(self) -> BoundingBox:
        if self.min_lat > self.max_lat:
            msg = "min_lat must not be greater than max_lat"
            raise ValueError(msg)
        return self


class Pagination(BaseModel):
    """Pagination metadata derived from the pre-slice total."""

    page: int
    limit: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class LeaderboardEntry(BaseModel):
    """A computed ranking row; never persisted."""

    rank: int
    key: str
    total: float
    count: int
    average: float
    total_duration: float | None = None


class LeaderboardPage(BaseModel):
    dimension: str
    entries: list[LeaderboardEntry] = Field(default_factory=list)
    pagination: Pagination
