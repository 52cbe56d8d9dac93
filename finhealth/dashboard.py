from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List

from finhealth.category_analytics import CategoryAnalytics, category_analytics
from finhealth.currency_conversion import Converter, ReportingConversion
from finhealth.entities import (
    ZERO,
    Bill,
    Snapshot,
    Transaction,
    coerce_amount,
    sum_amounts,
)
from finhealth.periods import HUNDRED, clamp, in_range, percentage, safe_divide, validate_range

UPCOMING_BILL_DAYS = 7
RECENT_TRANSACTION_LIMIT = 5
TOP_CATEGORY_LIMIT = 6


@dataclass(frozen=True)
class DashboardSummary:
    period_start: date
    period_end: date
    reporting_currency: str
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    savings_rate: Decimal
    transaction_count: int
    upcoming_bills: List[Bill]
    recent_transactions: List[Transaction]
    category_breakdown: List[CategoryAnalytics]
    total_accounts: int
    active_goals: int
    total_budgets: int


@dataclass(frozen=True)
class CurrencyHolding:
    currency: str
    amount: Decimal
    converted_amount: Decimal
    account_count: int
    percentage: Decimal


@dataclass(frozen=True)
class NetWorthSummary:
    total: Decimal
    reporting_currency: str
    visible_accounts: int
    total_accounts: int
    breakdown: List[CurrencyHolding]
    skipped_currencies: List[str]


def dashboard_summary(
    snapshot: Snapshot,
    start_date: date,
    end_date: date,
    today: date,
    reporting_currency: str = "USD",
) -> DashboardSummary:
    """Top-level KPIs for a period.

    ``reporting_currency`` is carried through for display; amounts are summed
    as supplied.
    """
    validate_range(start_date, end_date)
    period = [txn for txn in snapshot.transactions if in_range(txn.date, start_date, end_date)]
    total_income = sum_amounts(period, "income")
    total_expenses = sum_amounts(period, "expense")
    net_income = total_income - total_expenses

    horizon = today + timedelta(days=UPCOMING_BILL_DAYS)
    upcoming_bills = sorted(
        (bill for bill in snapshot.bills if in_range(bill.due_date, today, horizon)),
        key=lambda bill: bill.due_date,
    )
    recent = sorted(period, key=lambda txn: txn.date, reverse=True)

    return DashboardSummary(
        period_start=start_date,
        period_end=end_date,
        reporting_currency=reporting_currency,
        total_income=total_income,
        total_expenses=total_expenses,
        net_income=net_income,
        savings_rate=percentage(net_income, total_income),
        transaction_count=len(period),
        upcoming_bills=upcoming_bills,
        recent_transactions=recent[:RECENT_TRANSACTION_LIMIT],
        category_breakdown=category_analytics(period, start_date, end_date)[:TOP_CATEGORY_LIMIT],
        total_accounts=len(snapshot.accounts),
        active_goals=sum(
            1
            for goal in snapshot.goals
            if coerce_amount(goal.current_amount) < coerce_amount(goal.target_amount)
        ),
        total_budgets=len(snapshot.budgets),
    )


def net_worth_summary(
    snapshot: Snapshot,
    convert: Converter,
    reporting_currency: str = "USD",
) -> NetWorthSummary:
    """Visible balances in the reporting currency, broken down by currency.

    Accounts whose currency cannot be converted are left out of the total and
    the breakdown and listed in ``skipped_currencies``.
    """
    visible = [account for account in snapshot.accounts if account.is_visible]
    conversion = ReportingConversion(convert, reporting_currency)

    total = ZERO
    holdings: Dict[str, dict] = {}
    for account in visible:
        balance = coerce_amount(account.balance)
        converted = conversion(balance, account.currency_code)
        if converted is None:
            continue
        total += converted
        entry = holdings.setdefault(
            account.currency_code, {"amount": ZERO, "converted": ZERO, "count": 0}
        )
        entry["amount"] += balance
        entry["converted"] += converted
        entry["count"] += 1

    breakdown = [
        CurrencyHolding(
            currency=currency,
            amount=entry["amount"],
            converted_amount=entry["converted"],
            account_count=entry["count"],
            percentage=_holding_share(entry["converted"], total),
        )
        for currency, entry in holdings.items()
    ]
    return NetWorthSummary(
        total=total,
        reporting_currency=reporting_currency,
        visible_accounts=len(visible),
        total_accounts=len(snapshot.accounts),
        breakdown=breakdown,
        skipped_currencies=conversion.skipped_currencies,
    )


def _holding_share(converted: Decimal, total: Decimal) -> Decimal:
    if total <= ZERO:
        return ZERO
    return clamp(safe_divide(converted, total) * HUNDRED, ZERO, HUNDRED)
