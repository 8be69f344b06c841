from __future__ import annotations

import json

import fakeredis
import pytest
from mongo_fakes import make_record

from core.cache import ResultCache
from core.exceptions import ValidationError
from db.schemas import BoundingBox
from stats.services.leaderboard_service import (
    Dimension,
    LeaderboardRanker,
    build_leaderboard_pipeline,
)


@pytest.fixture
def ranker(records_col) -> LeaderboardRanker:
    return LeaderboardRanker(records_col)


@pytest.mark.asyncio
async def test_tie_is_broken_by_smaller_key(ranker, records_col) -> None:
    await records_col.insert_many(
        [
            make_record("zed", distance=3000),
            make_record("zed", distance=2000),
            make_record("amy", distance=5000),
            make_record("bob", distance=1000),
        ],
    )

    page = await ranker.get_leaderboard("owner", 1, 10)

    assert [(e.rank, e.key, e.total) for e in page.entries] == [
        (1, "amy", 5000),
        (2, "zed", 5000),
        (3, "bob", 1000),
    ]
    assert page.entries[1].count == 2
    assert page.entries[1].average == 2500
    assert page.entries[0].total_duration is not None


@pytest.mark.asyncio
async def test_order_is_strict_and_pages_concatenate(ranker, records_col) -> None:
    distances = [700, 300, 700, 150, 900, 300, 300, 50, 1200, 700, 10]
    await records_col.insert_many(
        [make_record(f"owner-{i:02d}", distance=d) for i, d in enumerate(distances)],
    )

    first = await ranker.get_leaderboard(Dimension.OWNER, 1, 4)
    total_pages = first.pagination.total_pages
    entries = list(first.entries)
    for page_number in range(2, total_pages + 1):
        page = await ranker.get_leaderboard(Dimension.OWNER, page_number, 4)
        entries.extend(page.entries)

    assert first.pagination.total_items == len(distances)
    assert total_pages == 3
    assert [e.rank for e in entries] == list(range(1, len(distances) + 1))
    assert sorted(e.key for e in entries) == sorted(
        f"owner-{i:02d}" for i in range(len(distances))
    )
    for higher, lower in zip(entries, entries[1:], strict=False):
        assert higher.total >= lower.total
        if higher.total == lower.total:
            assert higher.key < lower.key


@pytest.mark.asyncio
async def test_deleted_records_are_not_ranked(ranker, records_col) -> None:
    await records_col.insert_many(
        [
            make_record("amy", distance=100),
            make_record("bob", distance=5000, deleted=True),
        ],
    )

    page = await ranker.get_leaderboard("owner")

    assert [e.key for e in page.entries] == ["amy"]


@pytest.mark.asyncio
async def test_area_dimension_requires_positive_coverage(ranker, records_col) -> None:
    await records_col.insert_many(
        [
            make_record("u1", area="Harbor", area_coverage=300),
            make_record("u2", area="Harbor", area_coverage=200),
            make_record("u1", area="Old Town", area_coverage=900),
            make_record("u3", area="Empty Park", area_coverage=0),
            make_record("u3", area=None, area_coverage=1000),
            make_record("u4", area="", area_coverage=1000),
            make_record("u4", area="Unmeasured"),
        ],
    )

    page = await ranker.get_leaderboard("area", 1, 10)

    assert [(e.key, e.total, e.count) for e in page.entries] == [
        ("Old Town", 900, 1),
        ("Harbor", 500, 2),
    ]
    assert page.entries[1].average == 250
    assert page.entries[0].total_duration is None
    assert page.pagination.total_items == 2


@pytest.mark.asyncio
async def test_bounding_box_restricts_records(ranker, records_col) -> None:
    await records_col.insert_many(
        [
            make_record("outside", distance=9000, centroid=(5, 5)),
            make_record("inside", distance=100, centroid=(15, 15)),
            make_record("nowhere", distance=9000),
        ],
    )
    box = BoundingBox(min_lat=10, max_lat=20, min_lng=10, max_lng=20)

    page = await ranker.get_leaderboard("owner", 1, 10, box)

    assert [e.key for e in page.entries] == ["inside"]


@pytest.mark.asyncio
async def test_empty_leaderboard_is_not_an_error(ranker) -> None:
    page = await ranker.get_leaderboard("owner", 3, 10)

    assert page.entries == []
    assert page.pagination.total_items == 0
    assert page.pagination.page == 3
    assert page.pagination.has_next_page is False


@pytest.mark.asyncio
async def test_page_beyond_end_keeps_metadata(ranker, records_col) -> None:
    await records_col.insert_many([make_record(f"o{i}") for i in range(3)])

    page = await ranker.get_leaderboard("owner", 5, 2)

    assert page.entries == []
    assert page.pagination.total_items == 3
    assert page.pagination.total_pages == 2


@pytest.mark.asyncio
async def test_unknown_dimension_raises(ranker) -> None:
    with pytest.raises(ValidationError, match="dimension"):
        await ranker.get_leaderboard("vehicle")


def test_pipeline_sorts_by_total_then_key() -> None:
    pipeline = build_leaderboard_pipeline(Dimension.OWNER, skip=20, limit=10)
    assert {"$sort": {"total": -1, "_id": 1}} in pipeline
    facet = pipeline[-1]["$facet"]
    assert facet["entries"] == [{"$skip": 20}, {"$limit": 10}]


@pytest.mark.asyncio
async def test_cached_page_is_served_without_querying(records_col) -> None:
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    cache = ResultCache(client, ttl_seconds=60)
    ranker = LeaderboardRanker(records_col, cache)
    await records_col.insert_many([make_record("amy", distance=10)])

    first = await ranker.get_leaderboard("owner", 1, 10)
    await records_col.insert_many([make_record("bob", distance=99)])
    second = await ranker.get_leaderboard("owner", 1, 10)

    assert second == first
    keys = await client.keys("cache:leaderboard:owner:*")
    assert len(keys) == 1
    assert json.loads(await client.get(keys[0]))["dimension"] == "owner"
