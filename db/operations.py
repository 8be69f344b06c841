"""Database operations module.

Provides the retry wrapper used by every read and write against MongoDB.
Connection-level failures are retried with backoff; once the budget is spent
they surface as StoreUnavailable so callers never receive a stale or partial
aggregate in place of an error.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypeVar

from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from config import DB_MAX_RETRY_ATTEMPTS, DB_RETRY_BACKOFF_SECONDS
from core.exceptions import StoreUnavailable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Server error codes that indicate a transient primary step-down.
_TRANSIENT_ERROR_CODES = {11600, 11602}


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int | None = None,
    backoff: tuple[float, ...] = DB_RETRY_BACKOFF_SECONDS,
    operation_name: str = "database operation",
) -> T:
    """Execute a database operation with retry logic.

    Args:
        operation: Async function to execute
        max_attempts: Maximum number of attempts (defaults to config)
        backoff: Delay in seconds before each retry, last value repeats
        operation_name: Name of operation for logging

    Returns:
        Result of the operation

    Raises:
        StoreUnavailable: If the connection keeps failing after all attempts
        OperationFailure: For non-transient server errors (not retried)
    """
    if max_attempts is None:
        max_attempts = DB_MAX_RETRY_ATTEMPTS

    attempts = 0
    while True:
        attempts += 1
        retry_delay = backoff[min(attempts - 1, len(backoff) - 1)] if backoff else 0

        try:
            return await operation()

        except (ConnectionFailure, ServerSelectionTimeoutError, AutoReconnect) as e:
            if attempts >= max_attempts:
                logger.error(
                    "All %d connection attempts for %s failed. Last error: %s",
                    max_attempts,
                    operation_name,
                    str(e),
                )
                msg = f"Database unavailable for {operation_name}"
                raise StoreUnavailable(msg, {"attempts": attempts}) from e

            logger.warning(
                "Attempt %d/%d for %s failed due to connection error: %s. Retrying in %ss...",
                attempts,
                max_attempts,
                operation_name,
                str(e),
                retry_delay,
            )
            await asyncio.sleep(retry_delay)

        except OperationFailure as e:
            is_transient = (
                e.has_error_label("TransientTransactionError")
                or e.code in _TRANSIENT_ERROR_CODES
            )
            if not is_transient or attempts >= max_attempts:
                logger.error(
                    "Error in %s (attempt %d/%d, Code: %s): %s",
                    operation_name,
                    attempts,
                    max_attempts,
                    e.code,
                    str(e),
                )
                raise

            logger.warning(
                "Attempt %d/%d for %s failed with transient OperationFailure (Code: %s). Retrying in %ss...",
                attempts,
                max_attempts,
                operation_name,
                e.code,
                retry_delay,
            )
            await asyncio.sleep(retry_delay)
