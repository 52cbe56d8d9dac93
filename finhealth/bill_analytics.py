from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from finhealth.entities import ZERO, Bill, Snapshot, Transaction, coerce_amount, normalize_type
from finhealth.periods import in_range, month_key, validate_range


@dataclass(frozen=True)
class BillPayment:
    transaction_id: str
    date: date
    amount: Decimal
    status: str


@dataclass(frozen=True)
class BillMonth:
    month: str
    amount: Decimal
    status: str


@dataclass(frozen=True)
class BillAnalytics:
    bill_id: str
    bill_name: str
    amount: Decimal
    currency: str
    status: str
    due_date: date
    assigned_account: str
    payment_history: List[BillPayment]
    monthly_trend: List[BillMonth]


def bill_analytics(
    snapshot: Snapshot,
    start_date: date,
    end_date: date,
    today: date,
) -> List[BillAnalytics]:
    validate_range(start_date, end_date)
    return [_analyze_bill(snapshot, bill, start_date, end_date, today) for bill in snapshot.bills]


def payment_status(transactions: Sequence[Transaction]) -> Optional[str]:
    """Status implied by the most recent payment, or None without payments."""
    if not transactions:
        return None
    latest = max(transactions, key=lambda txn: txn.date)
    txn_status = normalize_type(latest.status or "completed")
    if txn_status == "completed":
        return "paid"
    if txn_status == "failed":
        return "failed"
    return "moved"


def derive_bill_status(bill: Bill, payments: Sequence[Transaction], today: date) -> str:
    status = payment_status(payments)
    if status is not None:
        return status
    if bill.due_date < today:
        return "overdue"
    return "upcoming"


def _analyze_bill(
    snapshot: Snapshot,
    bill: Bill,
    start_date: date,
    end_date: date,
    today: date,
) -> BillAnalytics:
    payments = sorted(
        (
            txn
            for txn in snapshot.transactions
            if txn.linked_bill_id == bill.id and in_range(txn.date, start_date, end_date)
        ),
        key=lambda txn: txn.date,
    )

    by_month: Dict[str, List[Transaction]] = {}
    for txn in payments:
        by_month.setdefault(month_key(txn.date), []).append(txn)

    return BillAnalytics(
        bill_id=bill.id,
        bill_name=bill.name,
        amount=coerce_amount(bill.amount),
        currency=bill.currency_code,
        status=derive_bill_status(bill, payments, today),
        due_date=bill.due_date,
        assigned_account=bill.assigned_account or "",
        payment_history=[
            BillPayment(
                transaction_id=txn.id,
                date=txn.date,
                amount=coerce_amount(txn.amount),
                status=txn.status or "completed",
            )
            for txn in payments
        ],
        monthly_trend=[
            BillMonth(
                month=month,
                amount=sum((coerce_amount(txn.amount) for txn in month_payments), ZERO),
                status=payment_status(month_payments),
            )
            for month, month_payments in sorted(by_month.items())
        ],
    )
