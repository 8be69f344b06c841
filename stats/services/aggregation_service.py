"""Aggregation of activity records into per-period summaries."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from date_utils import get_current_utc_time
from db.aggregation import aggregate_to_list
from db.models import ActivityRecord
from stats.periods import PeriodType, compute_period
from stats.services.stats_store import SUMMARY_METRIC_FIELDS, StatsStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from db.models import StatSummary

logger = logging.getLogger(__name__)

# m/s -> km/h
_MPS_TO_KMH = 3.6


def empty_summary() -> dict[str, Any]:
    return dict.fromkeys(SUMMARY_METRIC_FIELDS, 0.0) | {"total_count": 0}


def build_summary_pipeline(
    owner_id: str,
    start: datetime,
    end: datetime,
) -> list[dict[str, Any]]:
    """Pipeline reducing an owner's live records in ``[start, end)`` to one row."""
    return [
        {
            "$match": {
                "owner_id": owner_id,
                "deleted": False,
                "start_time": {"$gte": start, "$lt": end},
            },
        },
        {
            "$group": {
                "_id": None,
                "total_distance": {"$sum": "$distance"},
                "total_duration": {"$sum": "$duration"},
                "total_count": {"$sum": 1},
                "longest_distance": {"$max": "$distance"},
                "longest_duration": {"$max": "$duration"},
                "fastest_speed": {"$max": "$average_speed"},
            },
        },
    ]


def summarize_group(row: dict[str, Any] | None) -> dict[str, Any]:
    """Turn the ``$group`` output into the full set of summary metrics."""
    if not row or not row.get("total_count"):
        return empty_summary()

    total_distance = float(row.get("total_distance") or 0)
    total_duration = float(row.get("total_duration") or 0)
    average_speed = (
        total_distance / total_duration * _MPS_TO_KMH if total_duration > 0 else 0.0
    )
    return {
        "total_distance": total_distance,
        "total_duration": total_duration,
        "total_count": int(row["total_count"]),
        "average_speed": average_speed,
        "longest_distance": float(row.get("longest_distance") or 0),
        "longest_duration": float(row.get("longest_duration") or 0),
        "fastest_speed": float(row.get("fastest_speed") or 0),
    }


class AggregationEngine:
    """Computes and persists StatSummary rows from activity records."""

    def __init__(
        self,
        store: StatsStore,
        records_collection: Any = None,
        *,
        clock: Callable[[], datetime] = get_current_utc_time,
    ) -> None:
        """
        Args:
            store: Destination for computed summaries.
            records_collection: Optional raw activities collection (for
                testing); defaults to the ActivityRecord model's collection.
            clock: Source of "now" for all_time windows and default references.
        """
        self.store = store
        self._records = records_collection
        self._clock = clock

    @property
    def records(self) -> Any:
        return self._records if self._records is not None else ActivityRecord

    async def compute_summary(
        self,
        owner_id: str,
        period_type: PeriodType | str,
        reference: datetime | None = None,
    ) -> StatSummary:
        """Aggregate an owner's records for the window containing ``reference``.

        An owner with no records in the window still gets a stored row with
        zero totals, so reads after a compute always find one.

        Raises:
            InvalidPeriodType: For an unsupported period type.
            StoreUnavailable: If the database cannot be reached.
            UpsertConflict: If concurrent writers keep colliding on the key.
        """
        kind = PeriodType.parse(period_type)
        now = self._clock()
        start, end = compute_period(kind, reference or now, now=now)

        rows = await aggregate_to_list(
            self.records,
            build_summary_pipeline(owner_id, start, end),
        )
        summary = summarize_group(rows[0] if rows else None)

        logger.debug(
            "Computed %s summary for %s over [%s, %s): %d records",
            kind.value,
            owner_id,
            start.isoformat(),
            end.isoformat(),
            summary["total_count"],
        )
        return await self.store.upsert(owner_id, kind, start, end, summary)
