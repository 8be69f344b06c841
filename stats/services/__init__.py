"""Business logic services for statistics and rankings."""

from stats.services.aggregation_service import AggregationEngine
from stats.services.leaderboard_service import Dimension, LeaderboardRanker
from stats.services.stats_service import StatsService
from stats.services.stats_store import StatsStore

__all__ = [
    "AggregationEngine",
    "Dimension",
    "LeaderboardRanker",
    "StatsService",
    "StatsStore",
]
