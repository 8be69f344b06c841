"""Runtime startup/shutdown for the application process.

``StatsRuntime`` constructs the database manager, stores and services once at
startup and releases them at shutdown. Route handlers reach it through
``core.api.get_runtime(request)``; nothing is held in module-level singletons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from activities.services.activity_query_service import ActivityQueryService
from config import LEADERBOARD_CACHE_TTL_SECONDS, REDIS_URL
from core.cache import ResultCache
from date_utils import get_current_utc_time
from db.manager import DatabaseManager
from stats.services.aggregation_service import AggregationEngine
from stats.services.leaderboard_service import LeaderboardRanker
from stats.services.stats_service import StatsService
from stats.services.stats_store import StatsStore

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass
class StatsRuntime:
    """Explicitly wired components for one application process."""

    stats: StatsService
    leaderboard: LeaderboardRanker
    activities: ActivityQueryService
    cache: ResultCache
    database: DatabaseManager | None = None

    @classmethod
    def build(
        cls,
        *,
        records_collection: Any = None,
        stats_collection: Any = None,
        cache: ResultCache | None = None,
        clock: Callable[[], datetime] = get_current_utc_time,
        database: DatabaseManager | None = None,
    ) -> StatsRuntime:
        """Wire services over the given collections.

        Collections default to those bound to the Beanie document models.
        """
        cache = cache or ResultCache(None)
        store = StatsStore(stats_collection, clock=clock)
        engine = AggregationEngine(store, records_collection, clock=clock)
        return cls(
            stats=StatsService(engine, store),
            leaderboard=LeaderboardRanker(records_collection, cache),
            activities=ActivityQueryService(records_collection),
            cache=cache,
            database=database,
        )

    @classmethod
    async def start(cls, database: DatabaseManager | None = None) -> StatsRuntime:
        """Connect to MongoDB, initialize Beanie and build the services."""
        database = database or DatabaseManager()
        await database.init_beanie()
        logger.info("Beanie ODM initialized successfully.")

        cache = ResultCache.from_url(REDIS_URL, LEADERBOARD_CACHE_TTL_SECONDS)
        return cls.build(cache=cache, database=database)

    async def stop(self) -> None:
        """Clean up runtime resources."""
        await self.cache.close()
        if self.database is not None:
            await self.database.close()
        logger.info("Runtime shut down")
