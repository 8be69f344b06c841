"""Bounding-box filtering for viewport-scoped queries.

``contains_point`` is the reference predicate; ``build_geo_match`` expresses
the same test as a MongoDB filter on ``centroid`` so it can run server-side.
Boxes that cross the antimeridian are not supported and match nothing.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from db.models import GeoPoint
from db.schemas import BoundingBox


def contains_point(box: BoundingBox | None, point: GeoPoint | None) -> bool:
    """Return True when ``point`` lies inside ``box`` (edges included).

    With no box every record passes, with or without a point. With a box, a
    missing point cannot be proven inside and is rejected.
    """
    if box is None:
        return True
    if point is None:
        return False
    return (
        box.min_lat <= point.latitude <= box.max_lat
        and box.min_lng <= point.longitude <= box.max_lng
    )


def build_geo_match(box: BoundingBox | None, field: str = "centroid") -> dict[str, Any]:
    """Return the MongoDB filter equivalent of ``contains_point``."""
    if box is None:
        return {}
    # Range operators never match a missing field, which excludes records
    # without a centroid; min_lng > max_lng yields an empty range.
    return {
        f"{field}.latitude": {"$gte": box.min_lat, "$lte": box.max_lat},
        f"{field}.longitude": {"$gte": box.min_lng, "$lte": box.max_lng},
    }


def bounding_box_from_params(
    min_lat: float | None,
    max_lat: float | None,
    min_lng: float | None,
    max_lng: float | None,
) -> BoundingBox | None:
    """Build a BoundingBox from optional query parameters.

    Raises:
        ValidationError: If only some of the four edges are given, or the
            edges are out of range.
    """
    edges = (min_lat, max_lat, min_lng, max_lng)
    if all(edge is None for edge in edges):
        return None
    if any(edge is None for edge in edges):
        msg = "Bounding box requires min_lat, max_lat, min_lng and max_lng"
        raise ValidationError(msg)
    try:
        return BoundingBox(
            min_lat=min_lat,
            max_lat=max_lat,
            min_lng=min_lng,
            max_lng=max_lng,
        )
    except PydanticValidationError as e:
        msg = f"Invalid bounding box: {e.errors()[0]['msg']}"
        raise ValidationError(msg) from e
