"""Collection wrappers and document builders shared by the test modules."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from pymongo.errors import ConnectionFailure


class FlakyCollection:
    """Raises ConnectionFailure for the first ``failures`` calls of any method."""

    def __init__(self, inner: Any, failures: int) -> None:
        self._inner = inner
        self.failures = failures
        self.calls = 0
        self.name = inner.name

    def __getattr__(self, name: str) -> Any:
        target = getattr(self._inner, name)

        def _call(*args: Any, **kwargs: Any) -> Any:
            self.calls += 1
            if self.calls <= self.failures:
                msg = "connection refused"
                raise ConnectionFailure(msg)
            return target(*args, **kwargs)

        return _call


_counter = 0


def make_record(
    owner_id: str = "owner-1",
    *,
    start_time: datetime | None = None,
    distance: float = 1000.0,
    duration: float = 600.0,
    average_speed: float | None = None,
    record_id: str | None = None,
    area: str | None = None,
    area_coverage: float | None = None,
    centroid: tuple[float, float] | None = None,
    deleted: bool = False,
) -> dict[str, Any]:
    """Build a raw activities document as the ingestion service writes it."""
    global _counter
    _counter += 1
    start = start_time or datetime(2024, 3, 13, 8, 0, tzinfo=UTC)
    if average_speed is None:
        average_speed = distance / duration * 3.6 if duration else 0.0
    return {
        "record_id": record_id or f"rec-{_counter:05d}",
        "owner_id": owner_id,
        "start_time": start,
        "end_time": start + timedelta(seconds=max(duration, 1)),
        "distance": distance,
        "duration": duration,
        "average_speed": average_speed,
        "max_speed": average_speed,
        "area": area,
        "area_coverage": area_coverage,
        "centroid": (
            {"latitude": centroid[0], "longitude": centroid[1]} if centroid else None
        ),
        "notes": None,
        "deleted": deleted,
        "created_at": start,
    }
