"""Caller-facing statistics operations."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from stats.periods import PeriodType

if TYPE_CHECKING:
    from db.models import StatSummary
    from stats.services.aggregation_service import AggregationEngine
    from stats.services.stats_store import StatsStore

logger = logging.getLogger(__name__)

# Periods shown on an owner's overview and recomputed by a refresh.
OVERVIEW_PERIODS: tuple[PeriodType, ...] = (
    PeriodType.ALL_TIME,
    PeriodType.WEEKLY,
    PeriodType.MONTHLY,
    PeriodType.YEARLY,
)


class StatsService:
    """Service class for per-owner statistics."""

    def __init__(self, engine: AggregationEngine, store: StatsStore) -> None:
        self.engine = engine
        self.store = store

    async def compute_stats(
        self,
        owner_id: str,
        period_type: PeriodType | str,
        reference: datetime | None = None,
    ) -> StatSummary:
        return await self.engine.compute_summary(owner_id, period_type, reference)

    async def get_stats_by_period(
        self,
        owner_id: str,
        period_type: PeriodType | str,
    ) -> list[StatSummary]:
        """Stored summaries of one period type, newest window first."""
        return await self.store.get_by_period_type(owner_id, period_type)

    async def get_all_time_stats(self, owner_id: str) -> StatSummary:
        """Return the stored all_time row, computing it on first access."""
        summary = await self.store.get_all_time(owner_id)
        if summary is not None:
            return summary
        logger.info("No all_time stats for %s yet; computing", owner_id)
        return await self.compute_stats(owner_id, PeriodType.ALL_TIME)

    async def get_stats_overview(self, owner_id: str) -> dict[str, StatSummary]:
        """Current all_time, weekly, monthly and yearly summaries.

        The calendar periods are recomputed for the window containing now;
        all_time is read if present.
        """
        all_time, weekly, monthly, yearly = await asyncio.gather(
            self.get_all_time_stats(owner_id),
            self.compute_stats(owner_id, PeriodType.WEEKLY),
            self.compute_stats(owner_id, PeriodType.MONTHLY),
            self.compute_stats(owner_id, PeriodType.YEARLY),
        )
        return {
            "all_time": all_time,
            "weekly": weekly,
            "monthly": monthly,
            "yearly": yearly,
        }

    async def refresh_all_stats(self, owner_id: str) -> dict[str, StatSummary]:
        """Recompute every overview period, all_time included."""
        results = await asyncio.gather(
            *(self.compute_stats(owner_id, kind) for kind in OVERVIEW_PERIODS),
        )
        logger.info("Refreshed %d summaries for %s", len(results), owner_id)
        return {
            kind.value: summary
            for kind, summary in zip(OVERVIEW_PERIODS, results, strict=True)
        }
