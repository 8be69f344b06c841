"""Aggregation helpers for PyMongo async collections."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from beanie import Document

from db.operations import execute_with_retry

if TYPE_CHECKING:
    from collections.abc import Iterable


def _resolve_collection(source: Any) -> Any:
    """Accept either a Beanie document class or a raw collection.

    Driver collections answer any attribute with a sub-collection, so only
    document classes are asked for their PyMongo collection.
    """
    if isinstance(source, type) and issubclass(source, Document):
        return source.get_pymongo_collection()
    return source


def _source_name(source: Any) -> str:
    return getattr(source, "__name__", None) or getattr(source, "name", "collection")


async def aggregate_to_list(
    source: Any,
    pipeline: Iterable[dict[str, Any]],
    *,
    length: int | None = None,
    **kwargs: Any,
) -> list[dict[str, Any]]:
    """
    Run an aggregation pipeline and return results as a list.

    ``source`` is a document model or a collection. The cursor may be
    returned directly or via await, depending on the driver. Connection
    failures are retried and surface as StoreUnavailable.
    """
    stages = list(pipeline)

    async def _aggregate() -> list[dict[str, Any]]:
        collection = _resolve_collection(source)
        cursor = collection.aggregate(stages, **kwargs)
        if inspect.isawaitable(cursor):
            cursor = await cursor
        return await cursor.to_list(length=length)

    return await execute_with_retry(
        _aggregate,
        operation_name=f"aggregate on {_source_name(source)}",
    )
