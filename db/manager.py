"""
Database connection manager module.

Provides the DatabaseManager class that owns the MongoDB client for one
application runtime. It is constructed explicitly at startup and closed at
shutdown; nothing in the package holds a process-wide client.
"""

from __future__ import annotations

import logging
import os
from datetime import UTC
from typing import Any, Final

import certifi
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

logger = logging.getLogger(__name__)

DEFAULT_MONGO_URI: Final[str] = "mongodb://localhost:27017"
MONGODB_URI_ENV_VAR: Final[str] = "MONGODB_URI"
DEFAULT_DATABASE_NAME: Final[str] = "activity_stats"


def _get_mongo_uri() -> str:
    mongo_uri = os.getenv(MONGODB_URI_ENV_VAR, "").strip()
    return mongo_uri or DEFAULT_MONGO_URI


class DatabaseManager:
    """
    Owns the MongoDB client and database handle.

    Environment Variables:
        MONGODB_URI: MongoDB URI (default: mongodb://localhost:27017)
        MONGODB_DATABASE: Database name (default: activity_stats)
        MONGODB_MAX_POOL_SIZE: Connection pool size (default: 50)
        MONGODB_CONNECTION_TIMEOUT_MS: Connection timeout (default: 5000)
        MONGODB_SERVER_SELECTION_TIMEOUT_MS: Server selection timeout (default: 10000)
        MONGODB_SOCKET_TIMEOUT_MS: Socket timeout (default: 30000)
    """

    def __init__(
        self,
        mongo_uri: str | None = None,
        db_name: str | None = None,
        client: AsyncMongoClient | None = None,
    ) -> None:
        self._mongo_uri = mongo_uri or _get_mongo_uri()
        self._db_name = db_name or os.getenv("MONGODB_DATABASE", DEFAULT_DATABASE_NAME)
        self._client: AsyncMongoClient | None = client
        self._owns_client = client is None
        self._db: AsyncDatabase | None = None
        self._beanie_initialized = False

        self._max_pool_size = int(os.getenv("MONGODB_MAX_POOL_SIZE", "50"))
        self._connection_timeout_ms = int(
            os.getenv("MONGODB_CONNECTION_TIMEOUT_MS", "5000"),
        )
        self._server_selection_timeout_ms = int(
            os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "10000"),
        )
        self._socket_timeout_ms = int(
            os.getenv("MONGODB_SOCKET_TIMEOUT_MS", "30000"),
        )

        logger.debug(
            "Database configuration initialized with pool size %s",
            self._max_pool_size,
        )

    def _client_kwargs(self) -> dict[str, Any]:
        client_kwargs: dict[str, Any] = {
            "tz_aware": True,
            "tzinfo": UTC,
            "maxPoolSize": self._max_pool_size,
            "minPoolSize": 0,
            "maxIdleTimeMS": 60000,
            "connectTimeoutMS": self._connection_timeout_ms,
            "serverSelectionTimeoutMS": self._server_selection_timeout_ms,
            "socketTimeoutMS": self._socket_timeout_ms,
            "retryWrites": True,
            "retryReads": True,
            "appname": "ActivityStats",
        }

        # Configure TLS for MongoDB Atlas connections
        if self._mongo_uri.startswith("mongodb+srv://"):
            client_kwargs.update(tls=True, tlsCAFile=certifi.where())
        return client_kwargs

    def connect(self) -> AsyncDatabase:
        """Create the client (if not injected) and bind the database handle."""
        if self._db is not None:
            return self._db
        try:
            if self._client is None:
                logger.debug("Initializing MongoDB client")
                self._client = AsyncMongoClient(
                    self._mongo_uri,
                    **self._client_kwargs(),
                )
            self._db = self._client[self._db_name]
            logger.info("MongoDB client initialized for database %s", self._db_name)
        except Exception:
            logger.exception("Failed to initialize MongoDB client")
            raise
        return self._db

    @property
    def db(self) -> AsyncDatabase:
        """
        Get the database instance.

        Raises:
            RuntimeError: If connect() has not been called.
        """
        if self._db is None:
            msg = "DatabaseManager is not connected; call connect() first."
            raise RuntimeError(msg)
        return self._db

    async def init_beanie(self, document_models: list[type] | None = None) -> None:
        """
        Initialize Beanie ODM with the document models.

        Creates the model-level indexes, including the unique natural-key
        index on summaries.
        """
        if self._beanie_initialized:
            logger.debug("Beanie already initialized, skipping")
            return

        from beanie import init_beanie

        from db.models import ALL_DOCUMENT_MODELS

        models = document_models or ALL_DOCUMENT_MODELS
        await init_beanie(database=self.connect(), document_models=models)
        self._beanie_initialized = True
        logger.info("Beanie ODM initialized with %d document models", len(models))

    async def ping(self) -> bool:
        """Return True when the server answers a ping."""
        try:
            await self.db.command("ping")
        except Exception as e:
            logger.warning("MongoDB ping failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        """Close the client connections if this manager created them."""
        if self._client is not None and self._owns_client:
            try:
                logger.info("Closing MongoDB client connections...")
                await self._client.close()
            except Exception:
                logger.exception("Error closing MongoDB client")
        self._client = None if self._owns_client else self._client
        self._db = None
        self._beanie_initialized = False
        logger.info("MongoDB client state reset")
