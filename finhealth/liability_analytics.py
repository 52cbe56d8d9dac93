from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List

from finhealth.entities import ZERO, Liability, Snapshot, coerce_amount
from finhealth.periods import add_months, in_range, month_key, percentage, validate_range

# Fixed split applied to every payment; not an amortization schedule.
PRINCIPAL_SHARE = Decimal("0.7")
INTEREST_SHARE = Decimal("0.3")
DEFAULT_EMI_RATE = Decimal("0.05")


@dataclass(frozen=True)
class RepaymentMonth:
    month: str
    principal: Decimal
    interest: Decimal
    total: Decimal
    remaining: Decimal


@dataclass(frozen=True)
class LiabilityAnalytics:
    liability_id: str
    liability_name: str
    outstanding_balance: Decimal
    original_amount: Decimal
    remaining_amount: Decimal
    currency: str
    next_emi: Decimal
    next_emi_date: date
    repayment_trend: List[RepaymentMonth]
    interest_paid: Decimal
    principal_paid: Decimal
    completion_percentage: Decimal


def liability_analytics(
    snapshot: Snapshot,
    start_date: date,
    end_date: date,
    today: date,
) -> List[LiabilityAnalytics]:
    validate_range(start_date, end_date)
    return [
        _analyze_liability(snapshot, liability, start_date, end_date, today)
        for liability in snapshot.liabilities
    ]


def next_emi_amount(liability: Liability) -> Decimal:
    monthly_payment = coerce_amount(liability.monthly_payment)
    if monthly_payment > ZERO:
        return monthly_payment
    return coerce_amount(liability.original_amount) * DEFAULT_EMI_RATE


def _analyze_liability(
    snapshot: Snapshot,
    liability: Liability,
    start_date: date,
    end_date: date,
    today: date,
) -> LiabilityAnalytics:
    payments = sorted(
        (
            txn
            for txn in snapshot.transactions
            if txn.linked_liability_id == liability.id
            and in_range(txn.date, start_date, end_date)
        ),
        key=lambda txn: txn.date,
    )

    original_amount = coerce_amount(liability.original_amount)
    running_balance = original_amount
    principal_paid = ZERO
    interest_paid = ZERO
    months: Dict[str, dict] = {}
    for txn in payments:
        amount = coerce_amount(txn.amount)
        principal = amount * PRINCIPAL_SHARE
        interest = amount * INTEREST_SHARE
        running_balance -= principal
        principal_paid += principal
        interest_paid += interest

        bucket = months.setdefault(
            month_key(txn.date),
            {"principal": ZERO, "interest": ZERO, "total": ZERO, "remaining": running_balance},
        )
        bucket["principal"] += principal
        bucket["interest"] += interest
        bucket["total"] += amount
        bucket["remaining"] = running_balance

    return LiabilityAnalytics(
        liability_id=liability.id,
        liability_name=liability.name,
        outstanding_balance=original_amount - principal_paid,
        original_amount=original_amount,
        remaining_amount=coerce_amount(liability.remaining_amount),
        currency=liability.currency_code,
        next_emi=next_emi_amount(liability),
        next_emi_date=add_months(today, 1),
        repayment_trend=[
            RepaymentMonth(month=month, **bucket) for month, bucket in sorted(months.items())
        ],
        interest_paid=interest_paid,
        principal_paid=principal_paid,
        completion_percentage=percentage(principal_paid, original_amount),
    )
