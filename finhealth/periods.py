from __future__ import annotations

from calendar import monthrange
from datetime import date
from decimal import Decimal
from typing import List

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def validate_range(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date.")


def in_range(value: date, start_date: date, end_date: date) -> bool:
    return start_date <= value <= end_date


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_start(value: date) -> date:
    return value.replace(day=1)


def month_end(value: date) -> date:
    return value.replace(day=monthrange(value.year, value.month)[1])


def add_months(start_date: date, months: int, anchor_day: int | None = None) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    if anchor_day is None:
        anchor_day = start_date.day
    total_month = start_date.month - 1 + months
    year = start_date.year + total_month // 12
    month = total_month % 12 + 1
    last_day = monthrange(year, month)[1]
    day = min(anchor_day, last_day)
    return date(year, month, day)


def months_between(start_date: date, end_date: date) -> int:
    """Number of calendar months touched by the range, inclusive."""
    return (end_date.year - start_date.year) * 12 + (end_date.month - start_date.month) + 1


def iter_month_starts(start_date: date, end_date: date) -> List[date]:
    count = months_between(start_date, end_date)
    first = month_start(start_date)
    return [add_months(first, offset, 1) for offset in range(max(0, count))]


def days_between(start_date: date, end_date: date) -> int:
    return (end_date - start_date).days


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == 0:
        return ZERO
    return numerator / denominator


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    return safe_divide(part, whole) * HUNDRED


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(high, value))
