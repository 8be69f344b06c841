"""Global leaderboards of owners or areas by cumulative metrics."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from core.cache import ResultCache, make_cache_key
from core.exceptions import ValidationError
from db.aggregation import aggregate_to_list
from db.models import ActivityRecord
from db.schemas import BoundingBox, LeaderboardEntry, LeaderboardPage
from stats.geo import build_geo_match
from stats.serializers import calculate_pagination, normalize_page

logger = logging.getLogger(__name__)


class Dimension(StrEnum):
    OWNER = "owner"
    AREA = "area"

    @classmethod
    def parse(cls, value: Dimension | str) -> Dimension:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            allowed = ", ".join(d.value for d in cls)
            msg = f"Invalid leaderboard dimension '{value}'. Must be one of: {allowed}"
            raise ValidationError(msg, {"dimension": value}) from e


def build_leaderboard_pipeline(
    dimension: Dimension,
    skip: int,
    limit: int,
    bounding_box: BoundingBox | None = None,
) -> list[dict[str, Any]]:
    """Group, filter and sort records, then split into a count and one page.

    The ``$facet`` keeps the total and the page on the same snapshot.
    """
    match_stage: dict[str, Any] = {"deleted": False, **build_geo_match(bounding_box)}

    if dimension is Dimension.OWNER:
        group_stage = {
            "_id": "$owner_id",
            "total": {"$sum": "$distance"},
            "count": {"$sum": 1},
            "total_duration": {"$sum": "$duration"},
        }
        eligible: dict[str, Any] = {}
    else:
        match_stage["area"] = {"$exists": True, "$nin": [None, ""]}
        match_stage["area_coverage"] = {"$gt": 0}
        group_stage = {
            "_id": "$area",
            "total": {"$sum": "$area_coverage"},
            "count": {"$sum": 1},
        }
        eligible = {"total": {"$gt": 0}}

    pipeline: list[dict[str, Any]] = [
        {"$match": match_stage},
        {"$group": group_stage},
    ]
    if eligible:
        pipeline.append({"$match": eligible})
    pipeline.extend(
        [
            # Equal totals fall back to the key so the order is total.
            {"$sort": {"total": -1, "_id": 1}},
            {
                "$facet": {
                    "metadata": [{"$count": "total_items"}],
                    "entries": [{"$skip": skip}, {"$limit": limit}],
                },
            },
        ],
    )
    return pipeline


class LeaderboardRanker:
    """Read-only ranking over the activities collection."""

    def __init__(
        self,
        records_collection: Any = None,
        cache: ResultCache | None = None,
    ) -> None:
        self._records = records_collection
        self.cache = cache or ResultCache(None)

    @property
    def records(self) -> Any:
        return self._records if self._records is not None else ActivityRecord

    async def get_leaderboard(
        self,
        dimension: Dimension | str,
        page: int | None = None,
        limit: int | None = None,
        bounding_box: BoundingBox | None = None,
    ) -> LeaderboardPage:
        """Return one page of the ranking for ``dimension``.

        Ranks are 1-based positions in the full ordering: no two entries
        share a rank, and page 2 continues where page 1 ended.

        Raises:
            ValidationError: For an unknown dimension.
            StoreUnavailable: If the database cannot be reached.
        """
        kind = Dimension.parse(dimension)
        safe_page, safe_limit = normalize_page(page, limit)
        skip = (safe_page - 1) * safe_limit

        cache_key = make_cache_key(
            f"leaderboard:{kind.value}",
            {
                "page": safe_page,
                "limit": safe_limit,
                "box": bounding_box.model_dump() if bounding_box else None,
            },
        )
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return LeaderboardPage.model_validate(cached)

        rows = await aggregate_to_list(
            self.records,
            build_leaderboard_pipeline(kind, skip, safe_limit, bounding_box),
        )
        facet = rows[0] if rows else {}
        metadata = facet.get("metadata") or []
        total_items = int(metadata[0]["total_items"]) if metadata else 0

        entries = []
        for position, row in enumerate(facet.get("entries") or [], start=1):
            total = float(row.get("total") or 0)
            count = int(row.get("count") or 0)
            entries.append(
                LeaderboardEntry(
                    rank=skip + position,
                    key=str(row["_id"]),
                    total=total,
                    count=count,
                    average=total / count if count else 0.0,
                    total_duration=(
                        float(row.get("total_duration") or 0)
                        if kind is Dimension.OWNER
                        else None
                    ),
                ),
            )

        result = LeaderboardPage(
            dimension=kind.value,
            entries=entries,
            pagination=calculate_pagination(total_items, safe_page, safe_limit),
        )
        logger.debug(
            "Leaderboard %s page %d: %d of %d groups",
            kind.value,
            safe_page,
            len(entries),
            total_items,
        )
        await self.cache.set(cache_key, result.model_dump(mode="json"))
        return result
