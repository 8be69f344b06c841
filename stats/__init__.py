"""Statistics aggregation and leaderboard package.

The package is organized into:
- periods.py: Calendar period windows
- geo.py: Bounding-box filtering
- services/: Aggregation, persistence, ranking and the caller-facing service
- routes/: API endpoint handlers
- serializers.py: Display units, rounding and pagination helpers
"""

from fastapi import APIRouter

from stats.routes import leaderboard, summaries

router = APIRouter()

router.include_router(summaries.router, tags=["stats"])
router.include_router(leaderboard.router, tags=["leaderboard"])

__all__ = ["router"]
