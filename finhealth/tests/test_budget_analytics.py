import unittest
from datetime import date
from decimal import Decimal

from finhealth.budget_analytics import budget_analytics, budget_status
from finhealth.entities import Budget, Category, Snapshot, Transaction


def make_txn(txn_id, amount, category, txn_date=date(2024, 5, 10)):
    return Transaction(
        id=txn_id,
        date=txn_date,
        amount=Decimal(amount),
        type="expense",
        account_id="chk",
        currency_code="USD",
        category=category,
    )


class BudgetAnalyticsTests(unittest.TestCase):
    def test_warning_tier_at_ninety_percent(self) -> None:
        snapshot = Snapshot(
            transactions=[make_txn("t1", "100", "Groceries"), make_txn("t2", "80", "Groceries")],
            budgets=[Budget(id="b1", category="Groceries", monthly_limit=Decimal("200"))],
        )

        result = budget_analytics(snapshot, date(2024, 5, 1), date(2024, 5, 31))[0]

        self.assertEqual(result.spent, Decimal("180"))
        self.assertEqual(result.progress_percentage, Decimal("90"))
        self.assertEqual(result.status, "warning")
        self.assertEqual(result.remaining, Decimal("20"))

    def test_status_tiers_are_monotonic(self) -> None:
        self.assertEqual(budget_status(Decimal("0")), "safe")
        self.assertEqual(budget_status(Decimal("79.99")), "safe")
        self.assertEqual(budget_status(Decimal("80")), "warning")
        self.assertEqual(budget_status(Decimal("99.99")), "warning")
        self.assertEqual(budget_status(Decimal("100")), "exceeded")
        self.assertEqual(budget_status(Decimal("250")), "exceeded")

    def test_daily_average_and_projection(self) -> None:
        snapshot = Snapshot(
            transactions=[make_txn("t1", "300", "Dining", date(2024, 5, 5))],
            budgets=[Budget(id="b1", category="Dining", monthly_limit=Decimal("250"))],
        )

        result = budget_analytics(snapshot, date(2024, 5, 1), date(2024, 5, 31))[0]

        self.assertEqual(result.daily_average, Decimal("10"))
        self.assertEqual(result.projected_monthly_spend, Decimal("300"))
        self.assertEqual(result.status, "exceeded")
        self.assertEqual(result.remaining, Decimal("-50"))
        self.assertEqual(result.monthly_trend[0].month, "2024-05")
        self.assertEqual(result.monthly_trend[0].remaining, Decimal("-50"))

    def test_projection_is_exact_when_average_is_not(self) -> None:
        snapshot = Snapshot(
            transactions=[make_txn("t1", "310", "Dining", date(2024, 5, 5))],
            budgets=[Budget(id="b1", category="Dining", monthly_limit=Decimal("500"))],
        )

        result = budget_analytics(snapshot, date(2024, 5, 1), date(2024, 5, 31))[0]

        self.assertEqual(result.projected_monthly_spend, Decimal("310"))

    def test_single_day_range_has_zero_daily_average(self) -> None:
        snapshot = Snapshot(
            transactions=[make_txn("t1", "40", "Dining", date(2024, 5, 5))],
            budgets=[Budget(id="b1", category="Dining", monthly_limit=Decimal("100"))],
        )

        result = budget_analytics(snapshot, date(2024, 5, 5), date(2024, 5, 5))[0]

        self.assertEqual(result.spent, Decimal("40"))
        self.assertEqual(result.daily_average, Decimal("0"))

    def test_budget_covers_subcategories(self) -> None:
        categories = [
            Category(id="c1", name="Transport", type="expense"),
            Category(id="c2", name="Fuel", type="expense", parent_id="c1"),
            Category(id="c3", name="Parking", type="expense", parent_id="c2"),
            Category(id="c4", name="Dining", type="expense"),
        ]
        snapshot = Snapshot(
            transactions=[
                make_txn("t1", "50", "Transport"),
                make_txn("t2", "30", "Fuel"),
                make_txn("t3", "20", "parking"),
                make_txn("t4", "99", "Dining"),
            ],
            budgets=[Budget(id="b1", category="Transport", monthly_limit=Decimal("400"))],
            categories=categories,
        )

        result = budget_analytics(snapshot, date(2024, 5, 1), date(2024, 5, 31))[0]

        self.assertEqual(result.spent, Decimal("100"))
        self.assertEqual(result.progress_percentage, Decimal("25"))
        self.assertEqual(result.status, "safe")


if __name__ == "__main__":
    unittest.main()
