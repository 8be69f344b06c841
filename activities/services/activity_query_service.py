"""Read-side queries over activity records.

Owner listings, date-range and recent lookups, and the community feed. All
listings share the page/limit clamping and pagination metadata used by the
leaderboard.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pymongo import ASCENDING, DESCENDING

from core.exceptions import InvalidDateRange
from date_utils import ensure_utc
from db.models import ActivityRecord
from db.operations import execute_with_retry
from db.schemas import BoundingBox
from stats.geo import build_geo_match
from stats.serializers import calculate_pagination, normalize_page

logger = logging.getLogger(__name__)

# Newest first; record_id keeps equal start times in a stable order.
FEED_SORT = [("start_time", DESCENDING), ("record_id", ASCENDING)]


class ActivityQueryService:
    """Paginated reads of ActivityRecord documents."""

    def __init__(self, records_collection: Any = None) -> None:
        """
        Args:
            records_collection: Optional raw activities collection (for
                testing); defaults to the ActivityRecord model's collection.
        """
        self._records = records_collection

    @property
    def collection(self) -> Any:
        if self._records is not None:
            return self._records
        return ActivityRecord.get_pymongo_collection()

    async def _find(
        self,
        query: dict[str, Any],
        *,
        skip: int = 0,
        limit: int = 0,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[ActivityRecord]:
        async def _run() -> list[dict[str, Any]]:
            cursor = self.collection.find(query).sort(sort or FEED_SORT)
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return await cursor.to_list(length=None)

        documents = await execute_with_retry(_run, operation_name="activities find")
        return [ActivityRecord.model_validate(doc) for doc in documents]

    async def _count(self, query: dict[str, Any]) -> int:
        return await execute_with_retry(
            lambda: self.collection.count_documents(query),
            operation_name="activities count",
        )

    async def _paginate(
        self,
        query: dict[str, Any],
        page: int | None,
        limit: int | None,
    ) -> dict[str, Any]:
        safe_page, safe_limit = normalize_page(page, limit)
        total_items = await self._count(query)
        records = await self._find(
            query,
            skip=(safe_page - 1) * safe_limit,
            limit=safe_limit,
        )
        return {
            "records": records,
            "pagination": calculate_pagination(total_items, safe_page, safe_limit),
        }

    async def get_community_feed(
        self,
        page: int | None = None,
        limit: int | None = None,
        bounding_box: BoundingBox | None = None,
    ) -> dict[str, Any]:
        """Non-deleted records from every owner, newest first.

        With a bounding box, only records whose centroid lies inside it are
        returned.
        """
        query = {"deleted": False, **build_geo_match(bounding_box)}
        return await self._paginate(query, page, limit)

    async def get_owner_records(
        self,
        owner_id: str,
        page: int | None = None,
        limit: int | None = None,
        *,
        include_deleted: bool = False,
    ) -> dict[str, Any]:
        query: dict[str, Any] = {"owner_id": owner_id}
        if not include_deleted:
            query["deleted"] = False
        return await self._paginate(query, page, limit)

    async def get_records_by_date_range(
        self,
        owner_id: str,
        start: datetime,
        end: datetime,
    ) -> list[ActivityRecord]:
        """Return an owner's live records starting in ``[start, end)``.

        Raises:
            InvalidDateRange: If ``end`` is not after ``start``.
        """
        start_utc, end_utc = ensure_utc(start), ensure_utc(end)
        if end_utc <= start_utc:
            msg = "End date must be after start date"
            raise InvalidDateRange(
                msg,
                {"start": start_utc.isoformat(), "end": end_utc.isoformat()},
            )
        return await self._find(
            {
                "owner_id": owner_id,
                "deleted": False,
                "start_time": {"$gte": start_utc, "$lt": end_utc},
            },
        )

    async def get_recent_records(
        self,
        owner_id: str,
        limit: int | None = None,
    ) -> list[ActivityRecord]:
        _, safe_limit = normalize_page(1, limit)
        return await self._find(
            {"owner_id": owner_id, "deleted": False},
            limit=safe_limit,
        )
