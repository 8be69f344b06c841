"""API routes for an owner's activity records."""

import logging
from typing import Any

from fastapi import APIRouter, Query, Request

from core.api import api_route, get_runtime
from core.exceptions import ValidationException
from date_utils import normalize_to_utc_datetime
from stats.serializers import serialize_record

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/activities/{owner_id}")
@api_route(logger)
async def get_owner_records(
    request: Request,
    owner_id: str,
    page: int = Query(1, description="1-based page number"),
    limit: int | None = Query(None, description="Records per page"),
    include_deleted: bool = Query(False),
) -> dict[str, Any]:
    result = await get_runtime(request).activities.get_owner_records(
        owner_id,
        page,
        limit,
        include_deleted=include_deleted,
    )
    return {
        "records": [serialize_record(record) for record in result["records"]],
        "pagination": result["pagination"].model_dump(),
    }


@router.get("/api/activities/{owner_id}/range")
@api_route(logger)
async def get_records_by_date_range(
    request: Request,
    owner_id: str,
    start: str = Query(..., description="Range start (ISO 8601)"),
    end: str = Query(..., description="Range end (ISO 8601, exclusive)"),
) -> list[dict[str, Any]]:
    """Get an owner's records that started within [start, end)."""
    start_dt = normalize_to_utc_datetime(start)
    end_dt = normalize_to_utc_datetime(end)
    if start_dt is None or end_dt is None:
        msg = "start and end must be valid dates"
        raise ValidationException(msg)
    records = await get_runtime(request).activities.get_records_by_date_range(
        owner_id,
        start_dt,
        end_dt,
    )
    return [serialize_record(record) for record in records]


@router.get("/api/activities/{owner_id}/recent")
@api_route(logger)
async def get_recent_records(
    request: Request,
    owner_id: str,
    limit: int | None = Query(None, description="Maximum records to return"),
) -> list[dict[str, Any]]:
    records = await get_runtime(request).activities.get_recent_records(owner_id, limit)
    return [serialize_record(record) for record in records]
