"""Activity record read package.

The package is organized into:
- routes/: Owner listings and the community feed
- services/: Query logic over the activities collection
"""

from fastapi import APIRouter

from activities.routes import community, records

router = APIRouter()

router.include_router(records.router, tags=["activities"])
router.include_router(community.router, tags=["community"])

__all__ = ["router"]
