import pytest
from mongo_fakes import make_record
from pymongo import AsyncMongoClient

from db.aggregation import _resolve_collection, aggregate_to_list
from db.models import ActivityRecord


@pytest.mark.asyncio
async def test_driver_collection_is_used_as_is() -> None:
    client = AsyncMongoClient("mongodb://localhost:27017", connect=False)
    collection = client["stats_db"]["activities"]

    assert _resolve_collection(collection) is collection

    await client.close()


def test_document_class_resolves_to_its_collection(
    monkeypatch: pytest.MonkeyPatch, records_col
) -> None:
    monkeypatch.setattr(
        ActivityRecord,
        "get_pymongo_collection",
        classmethod(lambda cls: records_col),
    )

    assert _resolve_collection(ActivityRecord) is records_col


@pytest.mark.asyncio
async def test_aggregate_over_injected_collection(records_col) -> None:
    await records_col.insert_many(
        [
            make_record("a", distance=100),
            make_record("a", distance=50),
            make_record("b", distance=10),
        ],
    )

    rows = await aggregate_to_list(
        records_col,
        [
            {"$group": {"_id": "$owner_id", "total": {"$sum": "$distance"}}},
            {"$sort": {"_id": 1}},
        ],
    )

    assert rows == [{"_id": "a", "total": 150}, {"_id": "b", "total": 10}]


@pytest.mark.asyncio
async def test_aggregate_handles_awaitable_cursor() -> None:
    class _Cursor:
        async def to_list(self, length=None):
            return [{"n": 1}]

    class _Collection:
        name = "activities"

        async def aggregate(self, pipeline, **kwargs):
            return _Cursor()

    assert await aggregate_to_list(_Collection(), []) == [{"n": 1}]
