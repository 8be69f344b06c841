import sys
from datetime import UTC, datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
TESTS = Path(__file__).resolve().parent

for path in (ROOT, TESTS):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import asyncio

import mongomock
import pytest
from beanie import init_beanie
from mongomock_motor import AsyncMongoMockClient

from db.models import ActivityRecord, StatSummary  # noqa: E402
from stats.services.aggregation_service import AggregationEngine  # noqa: E402
from stats.services.stats_store import StatsStore  # noqa: E402

# Wednesday of ISO week 11 of 2024.
FIXED_NOW = datetime(2024, 3, 13, 12, 0, tzinfo=UTC)


@pytest.fixture
def mongo_db():
    """Synchronous view of the in-memory database, for seeding from sync tests."""
    client = mongomock.MongoClient(tz_aware=True)
    database = client["test_db"]
    for model in (ActivityRecord, StatSummary):
        database[model.Settings.name].create_indexes(model.Settings.indexes)
    return database


@pytest.fixture
def async_db(mongo_db):
    client = AsyncMongoMockClient(mock_mongo_client=mongo_db.client)
    return client["test_db"]


@pytest.fixture(autouse=True)
def beanie_db(async_db):
    """Bind the Beanie document models to the in-memory database."""
    asyncio.run(
        init_beanie(database=async_db, document_models=[ActivityRecord, StatSummary]),
    )
    return async_db


@pytest.fixture
def records_col(async_db):
    return async_db[ActivityRecord.Settings.name]


@pytest.fixture
def stats_col(async_db):
    return async_db[StatSummary.Settings.name]


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store(stats_col, clock) -> StatsStore:
    return StatsStore(stats_col, backoff_seconds=0, clock=clock)


@pytest.fixture
def engine(store, records_col, clock) -> AggregationEngine:
    return AggregationEngine(store, records_col, clock=clock)


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record backoff delays instead of sleeping."""
    delays: list[float] = []

    async def _fake_sleep(delay: float, *args, **kwargs) -> None:
        delays.append(delay)

    monkeypatch.setattr(asyncio, "sleep", _fake_sleep)
    return delays
