"""Centralized configuration for environment variables.

This module is the single source of truth for configuration used across the
application. Import constants from here rather than calling os.getenv directly
in multiple places.
"""

from __future__ import annotations

import os
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


# --- Logging ---
LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()


# --- Database retry policy ---
# Connection-level retries for reads and writes before StoreUnavailable.
DB_MAX_RETRY_ATTEMPTS: Final[int] = _int_env("DB_MAX_RETRY_ATTEMPTS", 3)
DB_RETRY_BACKOFF_SECONDS: Final[tuple[float, ...]] = (0.5, 1.0, 2.0)

# Duplicate-key retries for concurrent summary upserts before UpsertConflict.
STATS_UPSERT_MAX_ATTEMPTS: Final[int] = _int_env("STATS_UPSERT_MAX_ATTEMPTS", 3)
STATS_UPSERT_BACKOFF_SECONDS: Final[float] = _float_env(
    "STATS_UPSERT_BACKOFF_SECONDS",
    0.05,
)


# --- Pagination ---
DEFAULT_PAGE_LIMIT: Final[int] = _int_env("DEFAULT_PAGE_LIMIT", 10)
MAX_PAGE_LIMIT: Final[int] = _int_env("MAX_PAGE_LIMIT", 100)


# --- Leaderboard result cache ---
REDIS_URL: Final[str] = os.getenv("REDIS_URL", "").strip()
LEADERBOARD_CACHE_TTL_SECONDS: Final[int] = _int_env(
    "LEADERBOARD_CACHE_TTL_SECONDS",
    0,
)


# --- HTTP ---
CORS_ALLOWED_ORIGINS: Final[list[str]] = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
    if origin.strip()
]
PORT: Final[int] = _int_env("PORT", 8080)


__all__ = [
    "CORS_ALLOWED_ORIGINS",
    "DB_MAX_RETRY_ATTEMPTS",
    "DB_RETRY_BACKOFF_SECONDS",
    "DEFAULT_PAGE_LIMIT",
    "LEADERBOARD_CACHE_TTL_SECONDS",
    "LOG_LEVEL",
    "MAX_PAGE_LIMIT",
    "PORT",
    "REDIS_URL",
    "STATS_UPSERT_BACKOFF_SECONDS",
    "STATS_UPSERT_MAX_ATTEMPTS",
]
