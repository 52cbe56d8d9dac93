from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from finhealth.account_analytics import AccountAnalytics, account_analytics
from finhealth.bill_analytics import BillAnalytics, bill_analytics
from finhealth.budget_analytics import BudgetAnalytics, budget_analytics
from finhealth.calendar_events import CalendarEvent, calendar_events
from finhealth.category_analytics import CategoryAnalytics, category_analytics
from finhealth.category_tree import CategoryRollup, category_rollup
from finhealth.currency_conversion import Converter, build_converter, normalize_currency
from finhealth.dashboard import (
    DashboardSummary,
    NetWorthSummary,
    dashboard_summary,
    net_worth_summary,
)
from finhealth.entities import Snapshot
from finhealth.goal_analytics import GoalAnalytics, goal_analytics
from finhealth.health_score import FinancialHealthScore, financial_health_score
from finhealth.liability_analytics import LiabilityAnalytics, liability_analytics
from finhealth.trend_analysis import (
    Prediction,
    TrendPoint,
    predictive_analytics,
    trend_analysis,
)

logger = logging.getLogger(__name__)


class AnalyticsEngine:
    """Read-only analytics over one entity snapshot.

    Every method is a pure function of the snapshot, the reference date and
    its arguments, so an engine can be shared between callers or rebuilt per
    request.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        converter: Optional[Converter] = None,
        today: Optional[date] = None,
    ) -> None:
        self.snapshot = snapshot
        self.convert = converter or build_converter()
        self.today = today or date.today()
        logger.debug(
            "Analytics engine built: %d transactions, %d accounts, %d goals, reference date %s",
            len(snapshot.transactions),
            len(snapshot.accounts),
            len(snapshot.goals),
            self.today,
        )

    def get_category_analytics(
        self,
        start_date: date,
        end_date: date,
        account_id: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> List[CategoryAnalytics]:
        logger.debug("Category analytics for %s..%s", start_date, end_date)
        return category_analytics(
            self.snapshot.transactions,
            start_date,
            end_date,
            account_id=account_id,
            currency=currency,
        )

    def get_category_rollup(self, start_date: date, end_date: date) -> List[CategoryRollup]:
        return category_rollup(self.snapshot, start_date, end_date)

    def get_goal_analytics(self, goal_id: Optional[str] = None) -> List[GoalAnalytics]:
        logger.debug("Goal analytics for %s", goal_id or "all goals")
        return goal_analytics(self.snapshot, self.today, goal_id=goal_id)

    def get_bill_analytics(self, start_date: date, end_date: date) -> List[BillAnalytics]:
        return bill_analytics(self.snapshot, start_date, end_date, self.today)

    def get_liability_analytics(self, start_date: date, end_date: date) -> List[LiabilityAnalytics]:
        return liability_analytics(self.snapshot, start_date, end_date, self.today)

    def get_budget_analytics(self, start_date: date, end_date: date) -> List[BudgetAnalytics]:
        return budget_analytics(self.snapshot, start_date, end_date)

    def get_account_analytics(
        self,
        account_id: str,
        start_date: date,
        end_date: date,
    ) -> Optional[AccountAnalytics]:
        result = account_analytics(self.snapshot, account_id, start_date, end_date)
        if result is None:
            logger.debug("Account %s not in snapshot", account_id)
        return result

    def get_calendar_events(self, start_date: date, end_date: date) -> List[CalendarEvent]:
        return calendar_events(self.snapshot, start_date, end_date)

    def get_dashboard_summary(
        self,
        start_date: date,
        end_date: date,
        reporting_currency: str = "USD",
    ) -> DashboardSummary:
        return dashboard_summary(
            self.snapshot,
            start_date,
            end_date,
            self.today,
            reporting_currency=normalize_currency(reporting_currency),
        )

    def get_net_worth_summary(self, reporting_currency: str = "USD") -> NetWorthSummary:
        return net_worth_summary(
            self.snapshot,
            self.convert,
            reporting_currency=normalize_currency(reporting_currency),
        )

    def get_financial_health_score(self, reporting_currency: str = "USD") -> FinancialHealthScore:
        result = financial_health_score(
            self.snapshot,
            self.convert,
            self.today,
            reporting_currency=normalize_currency(reporting_currency),
        )
        logger.debug(
            "Health score %d (%s), %d recommendations",
            result.overall_score,
            result.health_status,
            len(result.recommendations),
        )
        return result

    def get_trend_analysis(self, start_date: date, end_date: date, metric: str) -> List[TrendPoint]:
        return trend_analysis(self.snapshot.transactions, start_date, end_date, metric)

    def get_predictive_analytics(
        self,
        start_date: date,
        end_date: date,
        metric: str,
    ) -> List[Prediction]:
        return predictive_analytics(self.snapshot.transactions, start_date, end_date, metric)
