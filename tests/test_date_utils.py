from datetime import UTC, date, datetime, timedelta, timezone

from date_utils import (
    ensure_utc,
    get_current_utc_time,
    normalize_to_utc_datetime,
    parse_timestamp,
)


def test_parse_timestamp_handles_empty_and_invalid() -> None:
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp("not-a-date") is None


def test_parse_timestamp_converts_offsets_to_utc() -> None:
    parsed = parse_timestamp("2024-01-01T00:00:00-05:00")
    assert parsed is not None
    assert parsed.tzinfo == UTC
    assert parsed.hour == 5


def test_parse_timestamp_treats_naive_values_as_utc() -> None:
    assert parse_timestamp("2024-01-01T08:30:00") == datetime(
        2024, 1, 1, 8, 30, tzinfo=UTC
    )
    assert parse_timestamp(datetime(2024, 1, 1, 8, 30)) == datetime(
        2024, 1, 1, 8, 30, tzinfo=UTC
    )


def test_ensure_utc_handles_naive_and_offset_datetimes() -> None:
    naive = ensure_utc(datetime(2024, 1, 1, 12, 0, 0))
    assert naive is not None
    assert naive.tzinfo == UTC
    assert naive.hour == 12

    tokyo = timezone(timedelta(hours=9))
    shifted = ensure_utc(datetime(2024, 1, 1, 3, 0, tzinfo=tokyo))
    assert shifted == datetime(2023, 12, 31, 18, 0, tzinfo=UTC)
    assert shifted.tzinfo == UTC


def test_ensure_utc_returns_none_for_none() -> None:
    assert ensure_utc(None) is None


def test_normalize_to_utc_datetime_accepts_date_and_string() -> None:
    normalized = normalize_to_utc_datetime(date(2024, 2, 3))
    assert normalized == datetime(2024, 2, 3, tzinfo=UTC)

    parsed = normalize_to_utc_datetime("2024-02-03")
    assert parsed == datetime(2024, 2, 3, tzinfo=UTC)


def test_normalize_to_utc_datetime_rejects_garbage() -> None:
    assert normalize_to_utc_datetime(None) is None
    assert normalize_to_utc_datetime("yesterday-ish") is None
    assert normalize_to_utc_datetime(12345) is None  # type: ignore[arg-type]


def test_get_current_utc_time_returns_utc() -> None:
    now = get_current_utc_time()
    assert isinstance(now, datetime)
    assert now.tzinfo == UTC
