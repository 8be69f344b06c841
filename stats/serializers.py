"""Serialization utilities for statistics and leaderboard responses.

Stored values stay in base units (meters, seconds) and are never rounded.
Human-facing derivatives are rounded here, half away from zero, to two
decimals so every consumer sees the same digits.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

from config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from db.schemas import Pagination

if TYPE_CHECKING:
    from db.models import ActivityRecord, StatSummary


def round_half_away(value: float, places: int = 2) -> float:
    """Round to ``places`` decimals, ties away from zero (2.345 -> 2.35, -2.345 -> -2.35).

    The decimal is built from ``str(value)`` so ties are judged on the shortest
    repr of the float rather than its binary expansion.
    """
    if value is None or not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def meters_to_km(meters: float) -> float:
    return round_half_away(meters / 1000)


def seconds_to_hours(seconds: float) -> float:
    return round_half_away(seconds / 3600)


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as HH:MM:SS."""
    total = max(0, int(seconds or 0))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def normalize_page(page: int | None, limit: int | None) -> tuple[int, int]:
    """Clamp ``page`` to >= 1 and ``limit`` to [1, MAX_PAGE_LIMIT]."""
    safe_page = max(1, 1 if page is None else int(page))
    requested = DEFAULT_PAGE_LIMIT if limit is None else int(limit)
    safe_limit = max(1, min(requested, MAX_PAGE_LIMIT))
    return safe_page, safe_limit


def calculate_pagination(total_items: int, page: int, limit: int) -> Pagination:
    """Build pagination metadata from the pre-slice total."""
    total_pages = math.ceil(total_items / limit) if limit > 0 else 0
    return Pagination(
        page=page,
        limit=limit,
        total_items=total_items,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def serialize_summary(summary: StatSummary) -> dict[str, Any]:
    """Convert a StatSummary into an API payload with display units."""
    return {
        "owner_id": summary.owner_id,
        "period_type": summary.period_type,
        "period_start": summary.period_start.isoformat(),
        "period_end": summary.period_end.isoformat(),
        "total_distance": summary.total_distance,
        "total_duration": summary.total_duration,
        "total_count": summary.total_count,
        "average_speed": round_half_away(summary.average_speed),
        "longest_distance": summary.longest_distance,
        "longest_duration": summary.longest_duration,
        "fastest_speed": round_half_away(summary.fastest_speed),
        "total_distance_km": meters_to_km(summary.total_distance),
        "total_duration_hours": seconds_to_hours(summary.total_duration),
        "total_duration_formatted": format_duration(summary.total_duration),
        "longest_distance_km": meters_to_km(summary.longest_distance),
        "updated_at": summary.updated_at.isoformat() if summary.updated_at else None,
    }


def serialize_record(record: ActivityRecord) -> dict[str, Any]:
    """Convert an ActivityRecord into an API payload."""
    return {
        "id": str(record.id) if record.id else None,
        "record_id": record.record_id,
        "owner_id": record.owner_id,
        "start_time": record.start_time.isoformat(),
        "end_time": record.end_time.isoformat(),
        "distance": record.distance,
        "distance_km": meters_to_km(record.distance),
        "duration": record.duration,
        "duration_formatted": format_duration(record.duration),
        "average_speed": round_half_away(record.average_speed),
        "max_speed": round_half_away(record.max_speed),
        "area": record.area,
        "area_coverage": record.area_coverage,
        "centroid": record.centroid.model_dump() if record.centroid else None,
        "notes": record.notes,
        "deleted": record.deleted,
    }
