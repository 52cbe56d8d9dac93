from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

from finhealth.category_tree import CategoryTree
from finhealth.entities import ZERO, Budget, Snapshot, Transaction, coerce_amount
from finhealth.periods import (
    days_between,
    in_range,
    month_key,
    percentage,
    safe_divide,
    validate_range,
)

WARNING_THRESHOLD = Decimal("80")
EXCEEDED_THRESHOLD = Decimal("100")
PROJECTION_DAYS = Decimal("30")


@dataclass(frozen=True)
class BudgetMonth:
    month: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal


@dataclass(frozen=True)
class BudgetAnalytics:
    budget_id: str
    category: str
    period: str
    monthly_limit: Decimal
    spent: Decimal
    remaining: Decimal
    progress_percentage: Decimal
    status: str
    monthly_trend: List[BudgetMonth]
    daily_average: Decimal
    projected_monthly_spend: Decimal


def budget_analytics(
    snapshot: Snapshot,
    start_date: date,
    end_date: date,
) -> List[BudgetAnalytics]:
    validate_range(start_date, end_date)
    tree = CategoryTree(snapshot.categories)
    filtered = [txn for txn in snapshot.transactions if in_range(txn.date, start_date, end_date)]
    days = Decimal(days_between(start_date, end_date))
    return [_evaluate_budget(filtered, budget, tree, days) for budget in snapshot.budgets]


def budget_status(progress_percentage: Decimal) -> str:
    if progress_percentage >= EXCEEDED_THRESHOLD:
        return "exceeded"
    if progress_percentage >= WARNING_THRESHOLD:
        return "warning"
    return "safe"


def budget_categories(budget: Budget, tree: CategoryTree) -> Set[str]:
    """Lower-cased category names a budget covers, subcategories included."""
    category = tree.find_by_name(budget.category)
    if category is None:
        return {budget.category.strip().lower()}
    return tree.subtree_names(category.id) | {budget.category.strip().lower()}


def _evaluate_budget(
    transactions: Iterable[Transaction],
    budget: Budget,
    tree: CategoryTree,
    days: Decimal,
) -> BudgetAnalytics:
    limit = coerce_amount(budget.monthly_limit)
    covered = budget_categories(budget, tree)
    matching = [txn for txn in transactions if _matches(txn.category, covered)]

    spent = ZERO
    months: Dict[str, Decimal] = {}
    for txn in matching:
        amount = coerce_amount(txn.amount)
        spent += amount
        key = month_key(txn.date)
        months[key] = months.get(key, ZERO) + amount

    progress = percentage(spent, limit)
    daily_average = safe_divide(spent, days)
    return BudgetAnalytics(
        budget_id=budget.id,
        category=budget.category,
        period=budget.period,
        monthly_limit=limit,
        spent=spent,
        remaining=limit - spent,
        progress_percentage=progress,
        status=budget_status(progress),
        monthly_trend=[
            BudgetMonth(month=month, limit=limit, spent=amount, remaining=limit - amount)
            for month, amount in sorted(months.items())
        ],
        daily_average=daily_average,
        projected_monthly_spend=safe_divide(spent * PROJECTION_DAYS, days),
    )


def _matches(category: Optional[str], covered: Set[str]) -> bool:
    if not category:
        return False
    return category.strip().lower() in covered
