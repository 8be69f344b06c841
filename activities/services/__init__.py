"""Activity record query services."""

from activities.services.activity_query_service import ActivityQueryService

__all__ = ["ActivityQueryService"]
