"""API routes for global leaderboards."""

import logging
from typing import Any

from fastapi import APIRouter, Query, Request

from core.api import api_route, get_runtime
from stats.geo import bounding_box_from_params

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/leaderboard/{dimension}")
@api_route(logger)
async def get_leaderboard(
    request: Request,
    dimension: str,
    page: int = Query(1, description="1-based page number"),
    limit: int | None = Query(None, description="Entries per page"),
    min_lat: float | None = Query(None),
    max_lat: float | None = Query(None),
    min_lng: float | None = Query(None),
    max_lng: float | None = Query(None),
) -> dict[str, Any]:
    """Rank owners by distance or areas by coverage."""
    box = bounding_box_from_params(min_lat, max_lat, min_lng, max_lng)
    result = await get_runtime(request).leaderboard.get_leaderboard(
        dimension,
        page,
        limit,
        box,
    )
    return result.model_dump(mode="json")
