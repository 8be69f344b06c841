from __future__ import annotations

import pytest
from pymongo.errors import AutoReconnect, OperationFailure

from core.exceptions import StoreUnavailable
from db.operations import execute_with_retry


@pytest.mark.asyncio
async def test_returns_result_after_connection_blip(sleeps) -> None:
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] < 3:
            msg = "reconnecting"
            raise AutoReconnect(msg)
        return "ok"

    result = await execute_with_retry(operation, max_attempts=3, backoff=(0.1, 0.2))

    assert result == "ok"
    assert sleeps == [0.1, 0.2]


@pytest.mark.asyncio
async def test_exhausted_retries_raise_store_unavailable(sleeps) -> None:
    async def operation():
        msg = "down"
        raise AutoReconnect(msg)

    with pytest.raises(StoreUnavailable) as exc_info:
        await execute_with_retry(operation, max_attempts=2, operation_name="ping")

    assert exc_info.value.details == {"attempts": 2}
    assert "ping" in exc_info.value.message
    assert len(sleeps) == 1


@pytest.mark.asyncio
async def test_non_transient_operation_failure_is_not_retried(sleeps) -> None:
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        msg = "bad query"
        raise OperationFailure(msg, code=2)

    with pytest.raises(OperationFailure):
        await execute_with_retry(operation, max_attempts=3)

    assert calls["count"] == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_primary_stepdown_is_retried(sleeps) -> None:
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] == 1:
            msg = "not primary"
            raise OperationFailure(msg, code=11602)
        return 42

    assert await execute_with_retry(operation, max_attempts=3) == 42
    assert calls["count"] == 2
