from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from finhealth.entities import ZERO, Transaction, coerce_amount, normalize_type
from finhealth.periods import (
    HUNDRED,
    add_months,
    clamp,
    in_range,
    iter_month_starts,
    month_key,
    month_start,
    safe_divide,
    validate_range,
)

SUPPORTED_METRICS = {"income", "expenses", "savings"}
TREND_THRESHOLD = Decimal("5")
HISTORY_MONTHS = 12
FORECAST_MONTHS = 3
DEFAULT_CONFIDENCE = Decimal("50")
MIN_CONFIDENCE = Decimal("30")
MAX_CONFIDENCE = Decimal("95")

METRIC_FACTORS: Dict[str, Tuple[str, ...]] = {
    "income": ("Salary trends", "Bonus patterns", "Investment returns"),
    "expenses": ("Seasonal spending", "Inflation impact", "Lifestyle changes"),
    "savings": ("Income stability", "Expense control", "Financial goals"),
}


@dataclass(frozen=True)
class TrendPoint:
    period: str
    value: Decimal
    change: Decimal
    change_percent: Decimal
    trend: str


@dataclass(frozen=True)
class Prediction:
    period: str
    predicted: Decimal
    confidence: Decimal
    trend: str
    factors: List[str]


def trend_analysis(
    transactions: Iterable[Transaction],
    start_date: date,
    end_date: date,
    metric: str,
) -> List[TrendPoint]:
    """Month-over-month series for one metric across the range."""
    validate_range(start_date, end_date)
    normalized_metric = _validate_metric(metric)

    income: Dict[str, Decimal] = {}
    expenses: Dict[str, Decimal] = {}
    for txn in transactions:
        if not in_range(txn.date, start_date, end_date):
            continue
        txn_type = normalize_type(txn.type)
        key = month_key(txn.date)
        if txn_type == "income":
            income[key] = income.get(key, ZERO) + coerce_amount(txn.amount)
        elif txn_type == "expense":
            expenses[key] = expenses.get(key, ZERO) + coerce_amount(txn.amount)

    points: List[TrendPoint] = []
    previous = ZERO
    for start in iter_month_starts(start_date, end_date):
        key = month_key(start)
        if normalized_metric == "income":
            value = income.get(key, ZERO)
        elif normalized_metric == "expenses":
            value = expenses.get(key, ZERO)
        else:
            value = income.get(key, ZERO) - expenses.get(key, ZERO)
        change = value - previous
        change_percent = safe_divide(change, abs(previous)) * HUNDRED
        points.append(
            TrendPoint(
                period=key,
                value=value,
                change=change,
                change_percent=change_percent,
                trend=_direction(change, change_percent),
            )
        )
        previous = value
    return points


def predictive_analytics(
    transactions: Iterable[Transaction],
    start_date: date,
    end_date: date,
    metric: str,
) -> List[Prediction]:
    """Linear extrapolation of the recent average monthly change."""
    validate_range(start_date, end_date)
    normalized_metric = _validate_metric(metric)
    history_start = add_months(month_start(start_date), -HISTORY_MONTHS, 1)
    history = trend_analysis(transactions, history_start, end_date, normalized_metric)
    values = [point.value for point in history]

    confidence = prediction_confidence(values)
    direction = predicted_trend(values)
    factors = list(METRIC_FACTORS[normalized_metric])
    anchor = month_start(end_date)
    return [
        Prediction(
            period=month_key(add_months(anchor, months_ahead, 1)),
            predicted=predict_value(values, months_ahead),
            confidence=confidence,
            trend=direction,
            factors=factors,
        )
        for months_ahead in range(1, FORECAST_MONTHS + 1)
    ]


def predict_value(values: List[Decimal], months_ahead: int) -> Decimal:
    if not values:
        return ZERO
    if len(values) < 2:
        return values[0]
    recent = values[-3:]
    changes = [current - prior for prior, current in zip(recent, recent[1:])]
    average_change = sum(changes, ZERO) / Decimal(len(changes))
    return recent[-1] + average_change * months_ahead


def prediction_confidence(values: List[Decimal]) -> Decimal:
    """Lower month-to-month variation means higher confidence, within 30-95."""
    if len(values) < 3:
        return DEFAULT_CONFIDENCE
    recent = values[-6:]
    mean = sum(recent, ZERO) / Decimal(len(recent))
    variance = sum(((value - mean) ** 2 for value in recent), ZERO) / Decimal(len(recent))
    std_dev = variance.sqrt()
    coefficient = std_dev / mean if mean > ZERO else Decimal("1")
    return clamp(HUNDRED - coefficient * HUNDRED, MIN_CONFIDENCE, MAX_CONFIDENCE)


def predicted_trend(values: List[Decimal]) -> str:
    if len(values) < 2:
        return "stable"
    recent = values[-3:]
    first, last = recent[0], recent[-1]
    change = last - first
    change_percent = change / first * HUNDRED if first > ZERO else ZERO
    if abs(change_percent) < TREND_THRESHOLD:
        return "stable"
    return "increasing" if change > ZERO else "decreasing"


def _direction(change: Decimal, change_percent: Decimal) -> str:
    if abs(change_percent) > TREND_THRESHOLD:
        return "up" if change > ZERO else "down"
    return "stable"


def _validate_metric(metric: str) -> str:
    normalized = metric.strip().lower()
    if normalized not in SUPPORTED_METRICS:
        raise ValueError("Only income, expenses, or savings metrics are supported.")
    return normalized
