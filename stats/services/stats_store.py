"""Persistence adapter for StatSummary rows.

Writes go through a single atomic ``find_one_and_update(..., upsert=True)``
keyed by ``(owner_id, period_type, period_start)``. Two writers racing to
insert the same key can make one of them fail on the unique index with
DuplicateKeyError; that writer retries (the row now exists, so the retry is a
plain replace) and gives up with UpsertConflict after a bounded number of
attempts.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from config import STATS_UPSERT_BACKOFF_SECONDS, STATS_UPSERT_MAX_ATTEMPTS
from core.exceptions import UpsertConflict
from date_utils import ensure_utc, get_current_utc_time
from db.models import StatSummary
from db.operations import execute_with_retry
from stats.periods import PeriodType

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

# Metric fields written on every upsert; a write always replaces all of them.
SUMMARY_METRIC_FIELDS: tuple[str, ...] = (
    "total_distance",
    "total_duration",
    "total_count",
    "average_speed",
    "longest_distance",
    "longest_duration",
    "fastest_speed",
)


class StatsStore:
    """Upsert and ordered retrieval of StatSummary rows."""

    def __init__(
        self,
        collection: Any = None,
        *,
        max_attempts: int = STATS_UPSERT_MAX_ATTEMPTS,
        backoff_seconds: float = STATS_UPSERT_BACKOFF_SECONDS,
        clock: Callable[[], datetime] = get_current_utc_time,
    ) -> None:
        """
        Args:
            collection: Optional raw collection (for testing); defaults to the
                collection bound to the StatSummary model.
            max_attempts: Attempts before a duplicate-key race is surfaced.
            backoff_seconds: Base delay, doubled after each failed attempt.
            clock: Source of ``updated_at`` timestamps.
        """
        self._collection = collection
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self._clock = clock

    @property
    def collection(self) -> Any:
        if self._collection is not None:
            return self._collection
        return StatSummary.get_pymongo_collection()

    async def upsert(
        self,
        owner_id: str,
        period_type: PeriodType | str,
        period_start: datetime,
        period_end: datetime,
        summary: dict[str, Any],
    ) -> StatSummary:
        """Insert or fully replace the row keyed by the natural key.

        Args:
            owner_id: Owner of the summary
            period_type: Period the summary covers
            period_start: Inclusive window start (part of the key)
            period_end: Exclusive window end
            summary: Values for every field in SUMMARY_METRIC_FIELDS

        Returns:
            The stored row as written by this call.

        Raises:
            UpsertConflict: If duplicate-key collisions persist past the
                retry budget.
            StoreUnavailable: If the database cannot be reached.
        """
        kind = PeriodType.parse(period_type)
        missing = [field for field in SUMMARY_METRIC_FIELDS if field not in summary]
        if missing:
            msg = f"Summary is missing fields: {', '.join(missing)}"
            raise ValueError(msg)

        key = {
            "owner_id": owner_id,
            "period_type": kind.value,
            "period_start": ensure_utc(period_start),
        }
        update = {
            "$set": {
                "period_end": ensure_utc(period_end),
                **{field: summary[field] for field in SUMMARY_METRIC_FIELDS},
                "updated_at": self._clock(),
            },
        }

        attempt = 0
        while True:
            attempt += 1
            try:
                document = await execute_with_retry(
                    lambda: self.collection.find_one_and_update(
                        key,
                        update,
                        upsert=True,
                        return_document=ReturnDocument.AFTER,
                    ),
                    operation_name="stats upsert",
                )
                return StatSummary.model_validate(document)
            except DuplicateKeyError as e:
                if attempt >= self.max_attempts:
                    logger.error(
                        "Upsert for %s/%s/%s still conflicting after %d attempts",
                        owner_id,
                        kind.value,
                        key["period_start"].isoformat(),
                        attempt,
                    )
                    msg = "Concurrent update conflict while saving statistics"
                    raise UpsertConflict(
                        msg,
                        {
                            "owner_id": owner_id,
                            "period_type": kind.value,
                            "attempts": attempt,
                        },
                    ) from e

                delay = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "Duplicate key on stats upsert for %s/%s (attempt %d/%d); retrying in %.3fs",
                    owner_id,
                    kind.value,
                    attempt,
                    self.max_attempts,
                    delay,
                )
                await asyncio.sleep(delay)

    async def get(
        self,
        owner_id: str,
        period_type: PeriodType | str,
        period_start: datetime,
    ) -> StatSummary | None:
        kind = PeriodType.parse(period_type)
        document = await execute_with_retry(
            lambda: self.collection.find_one(
                {
                    "owner_id": owner_id,
                    "period_type": kind.value,
                    "period_start": ensure_utc(period_start),
                },
            ),
            operation_name="stats find_one",
        )
        return StatSummary.model_validate(document) if document else None

    async def get_by_period_type(
        self,
        owner_id: str,
        period_type: PeriodType | str,
    ) -> list[StatSummary]:
        """Return an owner's rows for one period type, newest window first."""
        kind = PeriodType.parse(period_type)

        async def _find() -> list[dict[str, Any]]:
            cursor = self.collection.find(
                {"owner_id": owner_id, "period_type": kind.value},
            ).sort([("period_start", DESCENDING), ("_id", ASCENDING)])
            return await cursor.to_list(length=None)

        documents = await execute_with_retry(
            _find,
            operation_name="stats find by period type",
        )
        return [StatSummary.model_validate(doc) for doc in documents]

    async def get_all_time(self, owner_id: str) -> StatSummary | None:
        """Return the owner's all_time row, or None if never computed."""
        document = await execute_with_retry(
            lambda: self.collection.find_one(
                {"owner_id": owner_id, "period_type": PeriodType.ALL_TIME.value},
            ),
            operation_name="stats find all_time",
        )
        return StatSummary.model_validate(document) if document else None
