from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from finhealth.entities import Snapshot, coerce_amount, normalize_type
from finhealth.periods import in_range, validate_range

# Presentation hints only.
INCOME_COLOR = "green"
EXPENSE_COLOR = "red"
BILL_COLOR = "orange"
GOAL_COLOR = "blue"


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    type: str
    title: str
    amount: Decimal
    currency: str
    date: date
    color: str
    account_id: Optional[str] = None
    category: Optional[str] = None
    goal_id: Optional[str] = None
    bill_id: Optional[str] = None
    status: Optional[str] = None


def calendar_events(
    snapshot: Snapshot,
    start_date: date,
    end_date: date,
) -> List[CalendarEvent]:
    validate_range(start_date, end_date)
    events: List[CalendarEvent] = []

    for txn in snapshot.transactions:
        if not in_range(txn.date, start_date, end_date):
            continue
        txn_type = normalize_type(txn.type)
        events.append(
            CalendarEvent(
                id=f"transaction-{txn.id}",
                type=txn_type,
                title=txn.description,
                amount=coerce_amount(txn.amount),
                currency=txn.currency_code,
                date=txn.date,
                color=INCOME_COLOR if txn_type == "income" else EXPENSE_COLOR,
                account_id=txn.account_id,
                category=txn.category,
                goal_id=txn.linked_goal_id,
                status=txn.status,
            )
        )

    for bill in snapshot.bills:
        if not in_range(bill.due_date, start_date, end_date):
            continue
        events.append(
            CalendarEvent(
                id=f"bill-{bill.id}",
                type="bill",
                title=bill.name,
                amount=coerce_amount(bill.amount),
                currency=bill.currency_code,
                date=bill.due_date,
                color=BILL_COLOR,
                account_id=bill.assigned_account,
                bill_id=bill.id,
                status="paid" if bill.is_paid else "upcoming",
            )
        )

    for txn in snapshot.transactions:
        if not txn.linked_goal_id or not in_range(txn.date, start_date, end_date):
            continue
        goal = snapshot.find_goal(txn.linked_goal_id)
        if goal is None:
            continue
        events.append(
            CalendarEvent(
                id=f"goal-{txn.id}",
                type="goal_contribution",
                title=f"Goal: {goal.name}",
                amount=coerce_amount(txn.amount),
                currency=txn.currency_code,
                date=txn.date,
                color=GOAL_COLOR,
                account_id=txn.account_id,
                goal_id=goal.id,
            )
        )

    events.sort(key=lambda event: event.date)
    return events
