import logging
import os
from datetime import date
from decimal import Decimal

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from finhealth.account_analytics import AccountAnalytics
from finhealth.bill_analytics import BillAnalytics
from finhealth.budget_analytics import BudgetAnalytics
from finhealth.calendar_events import CalendarEvent
from finhealth.category_analytics import CategoryAnalytics
from finhealth.category_tree import CategoryRollup
from finhealth.currency_conversion import normalize_currency
from finhealth.dashboard import DashboardSummary, NetWorthSummary
from finhealth.engine import AnalyticsEngine
from finhealth.entities import (
    Account,
    Bill,
    Budget,
    Category,
    Goal,
    Liability,
    Snapshot,
    Transaction,
)
from finhealth.goal_analytics import GoalAnalytics
from finhealth.health_score import FinancialHealthScore
from finhealth.liability_analytics import LiabilityAnalytics
from finhealth.periods import month_start
from finhealth.trend_analysis import Prediction, TrendPoint

logger = logging.getLogger(__name__)

app = FastAPI()

frontend_origin = os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[frontend_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_system_default_currency() -> str:
    raw = os.getenv("DEFAULT_CURRENCY", "USD")
    try:
        return normalize_currency(raw)
    except ValueError:
        return "USD"


SYSTEM_DEFAULT_CURRENCY = get_system_default_currency()


class TransactionPayload(BaseModel):
    id: str
    date: date
    amount: Decimal
    type: str
    account_id: str
    currency_code: str
    category: str | None = None
    description: str = ""
    status: str = "completed"
    transfer_to_account_id: str | None = None
    linked_goal_id: str | None = None
    linked_bill_id: str | None = None
    linked_liability_id: str | None = None
    original_amount: Decimal | None = None
    original_currency: str | None = None

    def to_entity(self) -> Transaction:
        return Transaction(**self.model_dump())


class AccountPayload(BaseModel):
    id: str
    name: str
    type: str
    balance: Decimal
    currency_code: str
    is_visible: bool = True

    def to_entity(self) -> Account:
        return Account(**self.model_dump())


class GoalPayload(BaseModel):
    id: str
    name: str
    current_amount: Decimal
    target_amount: Decimal
    currency_code: str
    target_date: date | None = None
    category: str = ""

    def to_entity(self) -> Goal:
        return Goal(**self.model_dump())


class BillPayload(BaseModel):
    id: str
    name: str
    amount: Decimal
    currency_code: str
    due_date: date
    next_due_date: date | None = None
    is_paid: bool = False
    assigned_account: str | None = None

    def to_entity(self) -> Bill:
        return Bill(**self.model_dump())


class LiabilityPayload(BaseModel):
    id: str
    name: str
    original_amount: Decimal
    remaining_amount: Decimal
    currency_code: str
    monthly_payment: Decimal | None = None
    due_date: date | None = None

    def to_entity(self) -> Liability:
        return Liability(**self.model_dump())


class BudgetPayload(BaseModel):
    id: str
    category: str
    monthly_limit: Decimal
    period: str = "monthly"

    def to_entity(self) -> Budget:
        return Budget(**self.model_dump())


class CategoryPayload(BaseModel):
    id: str
    name: str
    type: str
    parent_id: str | None = None

    def to_entity(self) -> Category:
        return Category(**self.model_dump())


class SnapshotPayload(BaseModel):
    transactions: list[TransactionPayload] = Field(default_factory=list)
    accounts: list[AccountPayload] = Field(default_factory=list)
    goals: list[GoalPayload] = Field(default_factory=list)
    bills: list[BillPayload] = Field(default_factory=list)
    liabilities: list[LiabilityPayload] = Field(default_factory=list)
    budgets: list[BudgetPayload] = Field(default_factory=list)
    categories: list[CategoryPayload] = Field(default_factory=list)

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            transactions=[item.to_entity() for item in self.transactions],
            accounts=[item.to_entity() for item in self.accounts],
            goals=[item.to_entity() for item in self.goals],
            bills=[item.to_entity() for item in self.bills],
            liabilities=[item.to_entity() for item in self.liabilities],
            budgets=[item.to_entity() for item in self.budgets],
            categories=[item.to_entity() for item in self.categories],
        )


class AnalyticsRequest(BaseModel):
    snapshot: SnapshotPayload = Field(default_factory=SnapshotPayload)
    as_of: date | None = None
    start_date: date | None = None
    end_date: date | None = None
    reporting_currency: str | None = None
    account_id: str | None = None
    currency: str | None = None
    goal_id: str | None = None
    metric: str = "expenses"


def build_engine(payload: AnalyticsRequest) -> AnalyticsEngine:
    logger.info(
        "Analytics request: %d transactions, %d accounts, as of %s",
        len(payload.snapshot.transactions),
        len(payload.snapshot.accounts),
        payload.as_of or "today",
    )
    return AnalyticsEngine(payload.snapshot.to_snapshot(), today=payload.as_of)


def resolve_range(payload: AnalyticsRequest, engine: AnalyticsEngine) -> tuple[date, date]:
    end_date = payload.end_date or engine.today
    start_date = payload.start_date or month_start(end_date)
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="Start date must be on or before end date.")
    return start_date, end_date


def resolve_reporting_currency(payload: AnalyticsRequest) -> str:
    if not payload.reporting_currency:
        return SYSTEM_DEFAULT_CURRENCY
    try:
        return normalize_currency(payload.reporting_currency)
    except ValueError as exc:
        logger.warning("Reporting currency rejected: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/analytics/categories", response_model=list[CategoryAnalytics])
def categories_report(payload: AnalyticsRequest) -> list[CategoryAnalytics]:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    return engine.get_category_analytics(
        start_date,
        end_date,
        account_id=payload.account_id,
        currency=payload.currency,
    )


@app.post("/analytics/category-rollup", response_model=list[CategoryRollup])
def category_rollup_report(payload: AnalyticsRequest) -> list[CategoryRollup]:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    return engine.get_category_rollup(start_date, end_date)


@app.post("/analytics/goals", response_model=list[GoalAnalytics])
def goals_report(payload: AnalyticsRequest) -> list[GoalAnalytics]:
    engine = build_engine(payload)
    return engine.get_goal_analytics(goal_id=payload.goal_id)


@app.post("/analytics/bills", response_model=list[BillAnalytics])
def bills_report(payload: AnalyticsRequest) -> list[BillAnalytics]:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    return engine.get_bill_analytics(start_date, end_date)


@app.post("/analytics/liabilities", response_model=list[LiabilityAnalytics])
def liabilities_report(payload: AnalyticsRequest) -> list[LiabilityAnalytics]:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    return engine.get_liability_analytics(start_date, end_date)


@app.post("/analytics/budgets", response_model=list[BudgetAnalytics])
def budgets_report(payload: AnalyticsRequest) -> list[BudgetAnalytics]:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    return engine.get_budget_analytics(start_date, end_date)


@app.post("/analytics/accounts/{account_id}", response_model=AccountAnalytics)
def account_report(account_id: str, payload: AnalyticsRequest) -> AccountAnalytics:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    result = engine.get_account_analytics(account_id, start_date, end_date)
    if result is None:
        logger.warning("Account analytics requested for unknown account %s", account_id)
        raise HTTPException(status_code=404, detail="Account not found.")
    return result


@app.post("/analytics/calendar", response_model=list[CalendarEvent])
def calendar_report(payload: AnalyticsRequest) -> list[CalendarEvent]:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    return engine.get_calendar_events(start_date, end_date)


@app.post("/analytics/dashboard", response_model=DashboardSummary)
def dashboard_report(payload: AnalyticsRequest) -> DashboardSummary:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    return engine.get_dashboard_summary(
        start_date,
        end_date,
        reporting_currency=resolve_reporting_currency(payload),
    )


@app.post("/analytics/net-worth", response_model=NetWorthSummary)
def net_worth_report(payload: AnalyticsRequest) -> NetWorthSummary:
    engine = build_engine(payload)
    return engine.get_net_worth_summary(resolve_reporting_currency(payload))


@app.post("/analytics/health-score", response_model=FinancialHealthScore)
def health_score_report(payload: AnalyticsRequest) -> FinancialHealthScore:
    engine = build_engine(payload)
    result = engine.get_financial_health_score(resolve_reporting_currency(payload))
    logger.info("Health score computed: %d (%s)", result.overall_score, result.health_status)
    return result


@app.post("/analytics/trends", response_model=list[TrendPoint])
def trends_report(payload: AnalyticsRequest) -> list[TrendPoint]:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    try:
        return engine.get_trend_analysis(start_date, end_date, payload.metric)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/analytics/predictions", response_model=list[Prediction])
def predictions_report(payload: AnalyticsRequest) -> list[Prediction]:
    engine = build_engine(payload)
    start_date, end_date = resolve_range(payload, engine)
    try:
        return engine.get_predictive_analytics(start_date, end_date, payload.metric)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
