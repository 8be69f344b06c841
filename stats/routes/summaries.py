"""API routes for per-owner statistics."""

import logging
from typing import Any

from fastapi import APIRouter, Query, Request

from core.api import api_route, get_runtime
from core.exceptions import ValidationException
from date_utils import normalize_to_utc_datetime
from stats.serializers import serialize_summary

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/stats/{owner_id}/overview")
@api_route(logger)
async def get_stats_overview(request: Request, owner_id: str) -> dict[str, Any]:
    """Get all-time, weekly, monthly and yearly stats for an owner."""
    overview = await get_runtime(request).stats.get_stats_overview(owner_id)
    return {period: serialize_summary(summary) for period, summary in overview.items()}


@router.post("/api/stats/{owner_id}/refresh")
@api_route(logger)
async def refresh_stats(request: Request, owner_id: str) -> dict[str, Any]:
    """Recompute every overview period for an owner."""
    refreshed = await get_runtime(request).stats.refresh_all_stats(owner_id)
    return {
        "status": "success",
        "stats": {period: serialize_summary(s) for period, s in refreshed.items()},
    }


@router.get("/api/stats/{owner_id}/all-time")
@api_route(logger)
async def get_all_time_stats(request: Request, owner_id: str) -> dict[str, Any]:
    summary = await get_runtime(request).stats.get_all_time_stats(owner_id)
    return serialize_summary(summary)


@router.get("/api/stats/{owner_id}/periods/{period_type}")
@api_route(logger)
async def get_stats_by_period(
    request: Request,
    owner_id: str,
    period_type: str,
) -> list[dict[str, Any]]:
    """Get stored summaries of one period type, newest first."""
    summaries = await get_runtime(request).stats.get_stats_by_period(
        owner_id,
        period_type,
    )
    return [serialize_summary(summary) for summary in summaries]


@router.post("/api/stats/{owner_id}/periods/{period_type}")
@api_route(logger)
async def compute_stats(
    request: Request,
    owner_id: str,
    period_type: str,
    ref_date: str | None = Query(None, description="Reference instant (ISO 8601)"),
) -> dict[str, Any]:
    """Compute and store the summary for the period containing ref_date."""
    reference = None
    if ref_date:
        reference = normalize_to_utc_datetime(ref_date)
        if reference is None:
            msg = f"Invalid ref_date '{ref_date}'"
            raise ValidationException(msg)
    summary = await get_runtime(request).stats.compute_stats(
        owner_id,
        period_type,
        reference,
    )
    return serialize_summary(summary)
