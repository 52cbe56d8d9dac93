from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Tuple

ZERO = Decimal("0")
OTHER_CATEGORY = "Other"

TRANSACTION_TYPES = {"income", "expense", "transfer"}
TRANSACTION_STATUSES = {"completed", "pending", "failed"}
CATEGORY_TYPES = {"income", "expense"}
BUDGET_PERIODS = {"weekly", "monthly", "yearly"}
ACCOUNT_TYPES = {
    "checking",
    "savings",
    "money_market",
    "bank_current",
    "bank_savings",
    "credit_card",
    "investment",
    "goals_vault",
    "cash",
    "digital_wallet",
}
LIQUID_ACCOUNT_TYPES = {
    "checking",
    "savings",
    "money_market",
    "bank_current",
    "bank_savings",
}


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    amount: Decimal
    type: str
    account_id: str
    currency_code: str
    category: Optional[str] = None
    description: str = ""
    status: str = "completed"
    transfer_to_account_id: Optional[str] = None
    linked_goal_id: Optional[str] = None
    linked_bill_id: Optional[str] = None
    linked_liability_id: Optional[str] = None
    original_amount: Optional[Decimal] = None
    original_currency: Optional[str] = None


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: str
    balance: Decimal
    currency_code: str
    is_visible: bool = True


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    current_amount: Decimal
    target_amount: Decimal
    currency_code: str
    target_date: Optional[date] = None
    category: str = ""


@dataclass(frozen=True)
class Bill:
    id: str
    name: str
    amount: Decimal
    currency_code: str
    due_date: date
    next_due_date: Optional[date] = None
    is_paid: bool = False
    assigned_account: Optional[str] = None


@dataclass(frozen=True)
class Liability:
    id: str
    name: str
    original_amount: Decimal
    remaining_amount: Decimal
    currency_code: str
    monthly_payment: Optional[Decimal] = None
    due_date: Optional[date] = None


@dataclass(frozen=True)
class Budget:
    id: str
    category: str
    monthly_limit: Decimal
    period: str = "monthly"


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: str
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time, read-only view of every entity the engine analyses.

    Collections are frozen into tuples on construction so nothing handed to
    the engine can be mutated through it.
    """

    transactions: Tuple[Transaction, ...] = field(default_factory=tuple)
    accounts: Tuple[Account, ...] = field(default_factory=tuple)
    goals: Tuple[Goal, ...] = field(default_factory=tuple)
    bills: Tuple[Bill, ...] = field(default_factory=tuple)
    liabilities: Tuple[Liability, ...] = field(default_factory=tuple)
    budgets: Tuple[Budget, ...] = field(default_factory=tuple)
    categories: Tuple[Category, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for name in (
            "transactions",
            "accounts",
            "goals",
            "bills",
            "liabilities",
            "budgets",
            "categories",
        ):
            object.__setattr__(self, name, tuple(getattr(self, name) or ()))

    def find_account(self, account_id: str) -> Optional[Account]:
        for account in self.accounts:
            if account.id == account_id:
                return account
        return None

    def find_goal(self, goal_id: str) -> Optional[Goal]:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        return None


def category_label(txn: Transaction) -> str:
    return txn.category or OTHER_CATEGORY


def normalize_type(value: str) -> str:
    return value.strip().lower()


def sum_amounts(transactions: Iterable[Transaction], txn_type: Optional[str] = None) -> Decimal:
    total = ZERO
    for txn in transactions:
        if txn_type is not None and normalize_type(txn.type) != txn_type:
            continue
        total += coerce_amount(txn.amount)
    return total


def coerce_amount(amount: Decimal | int | float | str | None) -> Decimal:
    if amount is None:
        return ZERO
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))
