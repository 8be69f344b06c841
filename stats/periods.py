"""Calendar period windows for statistics aggregation.

Every window is half-open: ``start <= instant < end``. Boundaries are computed
on UTC-aware datetimes; naive inputs are treated as UTC.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import StrEnum

from core.exceptions import InvalidPeriodType
from date_utils import ensure_utc, get_current_utc_time

# Fixed lower bound for all_time windows.
ALL_TIME_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class PeriodType(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ALL_TIME = "all_time"

    @classmethod
    def parse(cls, value: PeriodType | str) -> PeriodType:
        """Coerce a raw value into a PeriodType or raise InvalidPeriodType."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            allowed = ", ".join(p.value for p in cls)
            msg = f"Invalid period type '{value}'. Must be one of: {allowed}"
            raise InvalidPeriodType(msg, {"period_type": value}) from e


BOUNDED_PERIOD_TYPES: tuple[PeriodType, ...] = (
    PeriodType.DAILY,
    PeriodType.WEEKLY,
    PeriodType.MONTHLY,
    PeriodType.YEARLY,
)


def _midnight(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def compute_period(
    period_type: PeriodType | str,
    reference: datetime,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """
    Compute the ``(start, end)`` window of a period containing ``reference``.

    Args:
        period_type: One of the PeriodType values.
        reference: Instant the window is anchored on.
        now: Current instant, used as the end of an all_time window.
            Defaults to the wall clock at call time.

    Returns:
        Tuple of UTC-aware ``(start, end)`` datetimes; ``end`` is exclusive.

    Raises:
        InvalidPeriodType: If period_type is not a supported value.
    """
    kind = PeriodType.parse(period_type)
    ref = ensure_utc(reference)

    if kind is PeriodType.DAILY:
        start = _midnight(ref)
        return start, start + timedelta(days=1)

    if kind is PeriodType.WEEKLY:
        # Monday=1 ... Sunday=7; Sunday belongs to the week that began six days earlier.
        day_of_week = ref.isoweekday()
        shift = -6 if day_of_week == 7 else 1 - day_of_week
        start = _midnight(ref + timedelta(days=shift))
        return start, start + timedelta(days=7)

    if kind is PeriodType.MONTHLY:
        start = _midnight(ref.replace(day=1))
        if start.month == 12:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        return start, end

    if kind is PeriodType.YEARLY:
        start = _midnight(ref.replace(month=1, day=1))
        return start, start.replace(year=start.year + 1)

    end = ensure_utc(now) if now is not None else get_current_utc_time()
    return ALL_TIME_EPOCH, end
