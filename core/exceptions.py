"""
Centralized exception hierarchy for domain-specific errors.

This module provides custom exception classes that represent specific
error conditions in the application, enabling the HTTP layer to map each
kind to a response without inspecting messages.
"""


class ActivityStatsError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ActivityStatsError):
    """Exception raised when caller input fails validation."""


class InvalidPeriodType(ValidationError):
    """Exception raised for a period type outside the supported set."""


class InvalidDateRange(ValidationError):
    """Exception raised when a range's end is not after its start."""


class DuplicateResourceError(ActivityStatsError):
    """Exception raised when attempting to create a duplicate resource."""


class UpsertConflict(DuplicateResourceError):
    """Exception raised when concurrent upserts keep colliding on a key."""


class StoreUnavailable(ActivityStatsError):
    """Exception raised when the persistence layer cannot be reached."""


ActivityStatsException = ActivityStatsError
ValidationException = ValidationError
DuplicateResourceException = DuplicateResourceError
