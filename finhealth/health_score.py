"""Weighted financial health score.

Six sub-scores, each normalised to 0-100, are blended with fixed weights:

    liquidity        25   liquid balances / last month's expenses, 6 months = 100
    debt_to_income   20   100 - remaining debt / annualised income * 100
    savings_rate     20   savings rate % * 2, capped at 100
    emergency_fund   15   "emergency" goal savings / 6 months of expenses
    bill_payment     10   paid share of bills less 10 points per overdue bill (max 50)
    goal_progress    10   completed share of goals

Recommendations come from ``RECOMMENDATION_RULES``, evaluated in order and in
full; every rule whose predicate holds contributes its message.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Tuple

from finhealth.currency_conversion import Converter, ReportingConversion
from finhealth.entities import (
    LIQUID_ACCOUNT_TYPES,
    ZERO,
    Snapshot,
    coerce_amount,
    normalize_type,
)
from finhealth.periods import HUNDRED, clamp, in_range, month_end, month_start, safe_divide

ONE = Decimal("1")
COVERAGE_MONTHS = Decimal("6")
MONTHS_PER_YEAR = Decimal("12")
SAVINGS_MULTIPLIER = Decimal("2")
OVERDUE_PENALTY = Decimal("10")
MAX_OVERDUE_PENALTY = Decimal("50")

WEIGHTS: Dict[str, Decimal] = {
    "liquidity": Decimal("0.25"),
    "debt_to_income": Decimal("0.20"),
    "savings_rate": Decimal("0.20"),
    "emergency_fund": Decimal("0.15"),
    "bill_payment": Decimal("0.10"),
    "goal_progress": Decimal("0.10"),
}

HEALTH_STATUS_BANDS: Tuple[Tuple[int, str], ...] = (
    (90, "excellent"),
    (75, "good"),
    (60, "fair"),
    (40, "poor"),
)
LETTER_GRADE_BANDS: Tuple[Tuple[int, str], ...] = (
    (90, "A+"),
    (85, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
    (45, "D+"),
    (40, "D"),
    (35, "D-"),
)
RISK_LEVEL_BANDS: Tuple[Tuple[int, str], ...] = (
    (80, "low"),
    (60, "medium"),
    (40, "high"),
)

FALLBACK_RECOMMENDATION = "Excellent financial health! Consider investing for long-term growth"


@dataclass(frozen=True)
class HealthInputs:
    liquid_assets: Decimal
    monthly_expenses: Decimal
    monthly_income: Decimal
    total_debt: Decimal
    emergency_fund: Decimal
    total_bills: int
    paid_bills: int
    overdue_bills: int
    total_goals: int
    completed_goals: int


@dataclass(frozen=True)
class HealthComponent:
    score: Decimal
    ratio: Decimal
    weight: Decimal


@dataclass(frozen=True)
class RecommendationRule:
    component: str
    applies: Callable[[Dict[str, HealthComponent]], bool]
    message: str


@dataclass(frozen=True)
class FinancialHealthScore:
    overall_score: int
    health_status: str
    letter_grade: str
    risk_level: str
    reporting_currency: str
    components: Dict[str, HealthComponent]
    inputs: HealthInputs
    recommendations: List[str]
    last_updated: date
    skipped_currencies: List[str]


def _score(name: str, below: int, at_least: int = 0) -> Callable[[Dict[str, HealthComponent]], bool]:
    def predicate(components: Dict[str, HealthComponent]) -> bool:
        return at_least <= components[name].score < below

    return predicate


RECOMMENDATION_RULES: Tuple[RecommendationRule, ...] = (
    RecommendationRule(
        "liquidity",
        lambda c: c["liquidity"].score < 60 and c["liquidity"].ratio < 3,
        "Build emergency fund to cover at least 3-6 months of expenses",
    ),
    RecommendationRule(
        "liquidity",
        lambda c: c["liquidity"].score < 60 and c["liquidity"].ratio >= 3,
        "Consider increasing liquid savings for better financial security",
    ),
    RecommendationRule(
        "debt_to_income",
        lambda c: c["debt_to_income"].score < 60 and c["debt_to_income"].ratio > Decimal("0.36"),
        "Focus on reducing debt - your debt-to-income ratio is too high",
    ),
    RecommendationRule(
        "debt_to_income",
        lambda c: c["debt_to_income"].score < 60 and c["debt_to_income"].ratio <= Decimal("0.36"),
        "Consider debt consolidation or accelerated payment strategies",
    ),
    RecommendationRule(
        "savings_rate",
        _score("savings_rate", below=50),
        "Increase savings rate - aim for at least 20% of income",
    ),
    RecommendationRule(
        "savings_rate",
        _score("savings_rate", below=80, at_least=50),
        "Good savings rate! Consider increasing to 25-30% for better financial health",
    ),
    RecommendationRule(
        "emergency_fund",
        _score("emergency_fund", below=50),
        "Build emergency fund to cover 6 months of expenses",
    ),
    RecommendationRule(
        "emergency_fund",
        _score("emergency_fund", below=80, at_least=50),
        "Emergency fund is good, consider increasing to 8-12 months coverage",
    ),
    RecommendationRule(
        "bill_payment",
        _score("bill_payment", below=80),
        "Improve bill payment consistency - set up automatic payments",
    ),
    RecommendationRule(
        "goal_progress",
        _score("goal_progress", below=60),
        "Focus on completing existing goals before starting new ones",
    ),
)


def financial_health_score(
    snapshot: Snapshot,
    convert: Converter,
    today: date,
    reporting_currency: str = "USD",
) -> FinancialHealthScore:
    conversion = ReportingConversion(convert, reporting_currency)
    inputs = collect_health_inputs(snapshot, conversion, today)
    components = score_components(inputs)
    overall = overall_score(components)
    return FinancialHealthScore(
        overall_score=overall,
        health_status=_band(overall, HEALTH_STATUS_BANDS, "critical"),
        letter_grade=_band(overall, LETTER_GRADE_BANDS, "F"),
        risk_level=_band(overall, RISK_LEVEL_BANDS, "very_high"),
        reporting_currency=reporting_currency,
        components=components,
        inputs=inputs,
        recommendations=generate_recommendations(components),
        last_updated=today,
        skipped_currencies=conversion.skipped_currencies,
    )


def collect_health_inputs(
    snapshot: Snapshot,
    conversion: ReportingConversion,
    today: date,
) -> HealthInputs:
    """Gather scorer inputs in the reporting currency.

    Amounts the conversion cannot handle are left out of every total.
    """
    last_month_start = month_start(month_start(today) - timedelta(days=1))
    last_month_end = month_end(last_month_start)

    def total(converted) -> Decimal:
        return sum((amount for amount in converted if amount is not None), ZERO)

    liquid_assets = total(
        conversion(account.balance, account.currency_code)
        for account in snapshot.accounts
        if normalize_type(account.type) in LIQUID_ACCOUNT_TYPES
    )
    last_month = [
        txn for txn in snapshot.transactions if in_range(txn.date, last_month_start, last_month_end)
    ]
    monthly_expenses = total(
        conversion(txn.amount, txn.currency_code)
        for txn in last_month
        if normalize_type(txn.type) == "expense"
    )
    monthly_income = total(
        conversion(txn.amount, txn.currency_code)
        for txn in last_month
        if normalize_type(txn.type) == "income"
    )
    total_debt = total(
        conversion(liability.remaining_amount, liability.currency_code)
        for liability in snapshot.liabilities
    )
    emergency_fund = total(
        conversion(goal.current_amount, goal.currency_code)
        for goal in snapshot.goals
        if "emergency" in (goal.category or "").lower()
    )
    overdue_bills = sum(
        1
        for bill in snapshot.bills
        if not bill.is_paid and (bill.next_due_date or bill.due_date) < today
    )
    return HealthInputs(
        liquid_assets=liquid_assets,
        monthly_expenses=monthly_expenses,
        monthly_income=monthly_income,
        total_debt=total_debt,
        emergency_fund=emergency_fund,
        total_bills=len(snapshot.bills),
        paid_bills=sum(1 for bill in snapshot.bills if bill.is_paid),
        overdue_bills=overdue_bills,
        total_goals=len(snapshot.goals),
        completed_goals=sum(
            1
            for goal in snapshot.goals
            if coerce_amount(goal.current_amount) >= coerce_amount(goal.target_amount)
        ),
    )


def score_components(inputs: HealthInputs) -> Dict[str, HealthComponent]:
    liquidity_ratio = safe_divide(inputs.liquid_assets, inputs.monthly_expenses)
    liquidity_score = clamp(liquidity_ratio / COVERAGE_MONTHS * HUNDRED, ZERO, HUNDRED)

    debt_ratio = safe_divide(inputs.total_debt, inputs.monthly_income * MONTHS_PER_YEAR)
    debt_score = max(ZERO, HUNDRED - debt_ratio * HUNDRED)

    savings_rate = safe_divide(inputs.monthly_income - inputs.monthly_expenses, inputs.monthly_income) * HUNDRED
    savings_score = clamp(savings_rate * SAVINGS_MULTIPLIER, ZERO, HUNDRED)

    emergency_ratio = safe_divide(inputs.emergency_fund, inputs.monthly_expenses * COVERAGE_MONTHS)
    emergency_score = clamp(emergency_ratio * HUNDRED, ZERO, HUNDRED)

    if inputs.total_bills > 0:
        payment_rate = Decimal(inputs.paid_bills) / Decimal(inputs.total_bills)
    else:
        payment_rate = ONE
    penalty = min(MAX_OVERDUE_PENALTY, OVERDUE_PENALTY * inputs.overdue_bills)
    bill_score = max(ZERO, payment_rate * HUNDRED - penalty)

    if inputs.total_goals > 0:
        goal_progress = Decimal(inputs.completed_goals) / Decimal(inputs.total_goals)
    else:
        goal_progress = ONE
    goal_score = goal_progress * HUNDRED

    return {
        "liquidity": HealthComponent(liquidity_score, liquidity_ratio, WEIGHTS["liquidity"]),
        "debt_to_income": HealthComponent(debt_score, debt_ratio, WEIGHTS["debt_to_income"]),
        "savings_rate": HealthComponent(savings_score, savings_rate, WEIGHTS["savings_rate"]),
        "emergency_fund": HealthComponent(emergency_score, emergency_ratio, WEIGHTS["emergency_fund"]),
        "bill_payment": HealthComponent(bill_score, payment_rate, WEIGHTS["bill_payment"]),
        "goal_progress": HealthComponent(goal_score, goal_progress, WEIGHTS["goal_progress"]),
    }


def overall_score(components: Dict[str, HealthComponent]) -> int:
    weighted = sum((component.score * component.weight for component in components.values()), ZERO)
    rounded = int(weighted.quantize(ONE, rounding=ROUND_HALF_UP))
    return max(0, min(100, rounded))


def generate_recommendations(components: Dict[str, HealthComponent]) -> List[str]:
    messages = [rule.message for rule in RECOMMENDATION_RULES if rule.applies(components)]
    return messages or [FALLBACK_RECOMMENDATION]


def _band(score: int, bands: Tuple[Tuple[int, str], ...], floor_label: str) -> str:
    for threshold, label in bands:
        if score >= threshold:
            return label
    return floor_label
