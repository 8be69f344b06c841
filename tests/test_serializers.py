from datetime import UTC, datetime

import pytest

from db.models import StatSummary
from stats.serializers import (
    calculate_pagination,
    format_duration,
    meters_to_km,
    normalize_page,
    round_half_away,
    seconds_to_hours,
    serialize_summary,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (2.345, 2.35),
        (-2.345, -2.35),
        (2.5, 2.5),
        (0.005, 0.01),
        (1.004, 1.0),
        (float("nan"), 0.0),
        (None, 0.0),
    ],
)
def test_round_half_away(value, expected) -> None:
    assert round_half_away(value) == expected


def test_unit_conversions() -> None:
    assert meters_to_km(4500) == 4.5
    assert meters_to_km(1234.5) == 1.23
    assert seconds_to_hours(5400) == 1.5
    assert format_duration(3725) == "01:02:05"
    assert format_duration(0) == "00:00:00"
    assert format_duration(-10) == "00:00:00"


@pytest.mark.parametrize(
    ("page", "limit", "expected"),
    [
        (None, None, (1, 10)),
        (0, 5, (1, 5)),
        (-3, 500, (1, 100)),
        (4, 0, (4, 1)),
        (None, 0, (1, 1)),
        (2, -1, (2, 1)),
    ],
)
def test_normalize_page(page, limit, expected) -> None:
    assert normalize_page(page, limit) == expected


def test_calculate_pagination() -> None:
    pagination = calculate_pagination(total_items=25, page=2, limit=10)
    assert pagination.total_pages == 3
    assert pagination.has_next_page is True
    assert pagination.has_prev_page is True

    last = calculate_pagination(total_items=25, page=3, limit=10)
    assert last.has_next_page is False

    empty = calculate_pagination(total_items=0, page=1, limit=10)
    assert empty.total_pages == 0
    assert empty.has_next_page is False
    assert empty.has_prev_page is False


def test_serialize_summary_rounds_only_derived_values() -> None:
    summary = StatSummary.model_validate(
        {
            "owner_id": "u1",
            "period_type": "weekly",
            "period_start": datetime(2024, 3, 11, tzinfo=UTC),
            "period_end": datetime(2024, 3, 18, tzinfo=UTC),
            "total_distance": 4500.0,
            "total_duration": 1800.0,
            "total_count": 3,
            "average_speed": 9.0000001,
            "longest_distance": 2000.0,
            "longest_duration": 900.0,
            "fastest_speed": 12.345,
        },
    )
    payload = serialize_summary(summary)
    assert payload["total_distance"] == 4500.0
    assert payload["total_distance_km"] == 4.5
    assert payload["average_speed"] == 9.0
    assert payload["fastest_speed"] == 12.35
    assert payload["total_duration_formatted"] == "00:30:00"
    assert payload["period_start"] == "2024-03-11T00:00:00+00:00"
    assert payload["updated_at"] is None
