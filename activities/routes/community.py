"""API routes for the community feed."""

import logging
from typing import Any

from fastapi import APIRouter, Query, Request

from core.api import api_route, get_runtime
from stats.geo import bounding_box_from_params
from stats.serializers import serialize_record

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/community/feed")
@api_route(logger)
async def get_community_feed(
    request: Request,
    page: int = Query(1, description="1-based page number"),
    limit: int | None = Query(None, description="Records per page"),
    min_lat: float | None = Query(None),
    max_lat: float | None = Query(None),
    min_lng: float | None = Query(None),
    max_lng: float | None = Query(None),
) -> dict[str, Any]:
    """Recent records from every owner, optionally within a map viewport."""
    box = bounding_box_from_params(min_lat, max_lat, min_lng, max_lng)
    result = await get_runtime(request).activities.get_community_feed(page, limit, box)
    return {
        "records": [serialize_record(record) for record in result["records"]],
        "pagination": result["pagination"].model_dump(),
    }
