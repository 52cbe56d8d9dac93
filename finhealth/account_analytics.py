from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from finhealth.entities import (
    ZERO,
    Snapshot,
    category_label,
    coerce_amount,
    normalize_type,
    sum_amounts,
)
from finhealth.periods import in_range, month_key, percentage, safe_divide, validate_range

LARGEST_TRANSACTION_LIMIT = 5


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class AccountMonth:
    month: str
    income: Decimal
    expenses: Decimal
    net: Decimal
    balance: Decimal


@dataclass(frozen=True)
class TransactionSummary:
    id: str
    amount: Decimal
    description: str
    date: date
    category: str
    type: str


@dataclass(frozen=True)
class AccountAnalytics:
    account_id: str
    account_name: str
    account_type: str
    balance: Decimal
    currency: str
    transaction_count: int
    total_income: Decimal
    total_expenses: Decimal
    net_flow: Decimal
    category_breakdown: List[CategoryShare]
    monthly_trend: List[AccountMonth]
    largest_transactions: List[TransactionSummary]
    average_transaction_amount: Decimal


def account_analytics(
    snapshot: Snapshot,
    account_id: str,
    start_date: date,
    end_date: date,
) -> Optional[AccountAnalytics]:
    validate_range(start_date, end_date)
    account = snapshot.find_account(account_id)
    if account is None:
        return None

    transactions = sorted(
        (
            txn
            for txn in snapshot.transactions
            if txn.account_id == account_id and in_range(txn.date, start_date, end_date)
        ),
        key=lambda txn: txn.date,
    )
    total_income = sum_amounts(transactions, "income")
    total_expenses = sum_amounts(transactions, "expense")

    by_category: Dict[str, Decimal] = {}
    for txn in transactions:
        label = category_label(txn)
        by_category[label] = by_category.get(label, ZERO) + coerce_amount(txn.amount)
    category_total = sum(by_category.values(), ZERO)
    category_breakdown = sorted(
        (
            CategoryShare(
                category=label,
                amount=amount,
                percentage=percentage(amount, category_total),
            )
            for label, amount in by_category.items()
        ),
        key=lambda share: share.amount,
        reverse=True,
    )

    # Walks forward from the current balance: income adds, every outflow subtracts.
    running_balance = coerce_amount(account.balance)
    months: Dict[str, dict] = {}
    for txn in transactions:
        amount = coerce_amount(txn.amount)
        bucket = months.setdefault(
            month_key(txn.date),
            {"income": ZERO, "expenses": ZERO, "net": ZERO, "balance": running_balance},
        )
        if normalize_type(txn.type) == "income":
            bucket["income"] += amount
            running_balance += amount
        else:
            bucket["expenses"] += amount
            running_balance -= amount
        bucket["net"] = bucket["income"] - bucket["expenses"]
        bucket["balance"] = running_balance

    largest = sorted(transactions, key=lambda txn: abs(coerce_amount(txn.amount)), reverse=True)
    return AccountAnalytics(
        account_id=account.id,
        account_name=account.name,
        account_type=account.type,
        balance=coerce_amount(account.balance),
        currency=account.currency_code,
        transaction_count=len(transactions),
        total_income=total_income,
        total_expenses=total_expenses,
        net_flow=total_income - total_expenses,
        category_breakdown=category_breakdown,
        monthly_trend=[
            AccountMonth(month=month, **bucket) for month, bucket in sorted(months.items())
        ],
        largest_transactions=[
            TransactionSummary(
                id=txn.id,
                amount=coerce_amount(txn.amount),
                description=txn.description,
                date=txn.date,
                category=category_label(txn),
                type=normalize_type(txn.type),
            )
            for txn in largest[:LARGEST_TRANSACTION_LIMIT]
        ],
        average_transaction_amount=safe_divide(
            total_income + total_expenses, Decimal(len(transactions))
        ),
    )
