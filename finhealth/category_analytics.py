from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from finhealth.entities import ZERO, Transaction, category_label, coerce_amount, normalize_type
from finhealth.periods import in_range, month_key, percentage, safe_divide, validate_range

TREND_UP_FACTOR = Decimal("1.1")
TREND_DOWN_FACTOR = Decimal("0.9")


@dataclass(frozen=True)
class MonthlyAmount:
    month: str
    amount: Decimal


@dataclass(frozen=True)
class CategoryAnalytics:
    category: str
    total_amount: Decimal
    percentage: Decimal
    transaction_count: int
    type: str
    currency: str
    average_amount: Decimal
    trend: str
    monthly_trend: List[MonthlyAmount]


def category_analytics(
    transactions: Iterable[Transaction],
    start_date: date,
    end_date: date,
    account_id: Optional[str] = None,
    currency: Optional[str] = None,
) -> List[CategoryAnalytics]:
    """Group in-range transactions by category.

    A category's share is taken against the total of every category of the
    same transaction type, so expense shares sum to 100 and income shares
    sum to 100 independently.
    """
    validate_range(start_date, end_date)
    filtered = [
        txn
        for txn in transactions
        if in_range(txn.date, start_date, end_date)
        and (account_id is None or txn.account_id == account_id)
        and (currency is None or txn.currency_code == currency)
    ]

    groups: Dict[str, dict] = {}
    for txn in filtered:
        label = category_label(txn)
        group = groups.get(label)
        if group is None:
            group = {
                "total": ZERO,
                "count": 0,
                "type": normalize_type(txn.type),
                "currency": txn.currency_code,
                "months": {},
            }
            groups[label] = group
        amount = coerce_amount(txn.amount)
        group["total"] += amount
        group["count"] += 1
        key = month_key(txn.date)
        group["months"][key] = group["months"].get(key, ZERO) + amount

    type_totals: Dict[str, Decimal] = {}
    for group in groups.values():
        type_totals[group["type"]] = type_totals.get(group["type"], ZERO) + group["total"]

    results: List[CategoryAnalytics] = []
    for label, group in groups.items():
        monthly_trend = [
            MonthlyAmount(month=month, amount=amount)
            for month, amount in sorted(group["months"].items())
        ]
        results.append(
            CategoryAnalytics(
                category=label,
                total_amount=group["total"],
                percentage=percentage(group["total"], type_totals[group["type"]]),
                transaction_count=group["count"],
                type=group["type"],
                currency=group["currency"],
                average_amount=safe_divide(group["total"], Decimal(group["count"])),
                trend=classify_trend(monthly_trend),
                monthly_trend=monthly_trend,
            )
        )
    results.sort(key=lambda item: item.total_amount, reverse=True)
    return results


def classify_trend(monthly_trend: List[MonthlyAmount]) -> str:
    """Compare the last two month buckets with a 10% dead band."""
    if len(monthly_trend) < 2:
        return "stable"
    last_month = monthly_trend[-1].amount
    prev_month = monthly_trend[-2].amount
    if last_month > prev_month * TREND_UP_FACTOR:
        return "up"
    if last_month < prev_month * TREND_DOWN_FACTOR:
        return "down"
    return "stable"
