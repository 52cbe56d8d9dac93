from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from finhealth.entities import (
    ZERO,
    Goal,
    Snapshot,
    Transaction,
    category_label,
    coerce_amount,
    normalize_type,
)
from finhealth.periods import HUNDRED, add_months, percentage


@dataclass(frozen=True)
class AccountContribution:
    account_id: str
    account_name: str
    amount: Decimal
    currency: str


@dataclass(frozen=True)
class CategoryContribution:
    category: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class CrossCurrencyContribution:
    transaction_id: str
    original_amount: Decimal
    original_currency: str
    converted_amount: Decimal
    converted_currency: str


@dataclass(frozen=True)
class GoalAnalytics:
    goal_id: str
    goal_name: str
    current_amount: Decimal
    target_amount: Decimal
    currency: str
    progress_percentage: Decimal
    total_contributions: Decimal
    contribution_count: int
    contributions_by_account: List[AccountContribution]
    contributions_by_category: List[CategoryContribution]
    cross_currency_contributions: List[CrossCurrencyContribution]
    predicted_completion_date: Optional[date]


def goal_analytics(
    snapshot: Snapshot,
    today: date,
    goal_id: Optional[str] = None,
) -> List[GoalAnalytics]:
    goals = [goal for goal in snapshot.goals if goal_id is None or goal.id == goal_id]
    return [_analyze_goal(snapshot, goal, today) for goal in goals]


def is_goal_contribution(txn: Transaction, goal: Goal) -> bool:
    if txn.linked_goal_id == goal.id:
        return True
    if normalize_type(txn.type) != "expense" or not goal.name:
        return False
    return goal.name.lower() in (txn.description or "").lower()


def _analyze_goal(snapshot: Snapshot, goal: Goal, today: date) -> GoalAnalytics:
    contributions = [txn for txn in snapshot.transactions if is_goal_contribution(txn, goal)]

    by_account: Dict[str, dict] = {}
    by_category: Dict[str, Decimal] = {}
    cross_currency: List[CrossCurrencyContribution] = []
    for txn in contributions:
        amount = coerce_amount(txn.amount)
        account = snapshot.find_account(txn.account_id)
        if account is not None:
            entry = by_account.setdefault(
                account.id,
                {"name": account.name, "amount": ZERO, "currency": account.currency_code},
            )
            entry["amount"] += amount
            if txn.currency_code != goal.currency_code:
                cross_currency.append(
                    CrossCurrencyContribution(
                        transaction_id=txn.id,
                        original_amount=coerce_amount(txn.original_amount or amount),
                        original_currency=txn.original_currency or txn.currency_code,
                        converted_amount=amount,
                        converted_currency=txn.currency_code,
                    )
                )
        label = category_label(txn)
        by_category[label] = by_category.get(label, ZERO) + amount

    total_contributions = sum(by_category.values(), ZERO)
    target = coerce_amount(goal.target_amount)
    current = coerce_amount(goal.current_amount)
    # Not clamped: overfunded goals report more than 100.
    progress = percentage(current, target)

    return GoalAnalytics(
        goal_id=goal.id,
        goal_name=goal.name,
        current_amount=current,
        target_amount=target,
        currency=goal.currency_code,
        progress_percentage=progress,
        total_contributions=total_contributions,
        contribution_count=len(contributions),
        contributions_by_account=[
            AccountContribution(
                account_id=account_id,
                account_name=entry["name"],
                amount=entry["amount"],
                currency=entry["currency"],
            )
            for account_id, entry in by_account.items()
        ],
        contributions_by_category=[
            CategoryContribution(
                category=label,
                amount=amount,
                percentage=percentage(amount, total_contributions),
            )
            for label, amount in by_category.items()
        ],
        cross_currency_contributions=cross_currency,
        predicted_completion_date=forecast_completion_date(
            goal, progress, total_contributions, len(contributions), today
        ),
    )


def forecast_completion_date(
    goal: Goal,
    progress: Decimal,
    total_contributions: Decimal,
    contribution_count: int,
    today: date,
) -> Optional[date]:
    """Extrapolate from the average contribution, treated as one per month.

    Fractional months are truncated, so a goal less than one average
    contribution away is forecast for today.
    """
    if progress >= HUNDRED or goal.target_date is None:
        return None
    if coerce_amount(goal.target_amount) <= ZERO:
        return None
    monthly_contribution = total_contributions / Decimal(max(1, contribution_count))
    if monthly_contribution <= ZERO:
        return None
    remaining = coerce_amount(goal.target_amount) - coerce_amount(goal.current_amount)
    months_remaining = int(remaining / monthly_contribution)
    return add_months(today, months_remaining)
