import unittest
from datetime import date
from decimal import Decimal

from finhealth.entities import Transaction
from finhealth.trend_analysis import (
    predict_value,
    predicted_trend,
    prediction_confidence,
    predictive_analytics,
    trend_analysis,
)


def make_txn(txn_id, amount, txn_type, txn_date):
    return Transaction(
        id=txn_id,
        date=txn_date,
        amount=Decimal(amount),
        type=txn_type,
        account_id="chk",
        currency_code="USD",
    )


class TrendAnalysisTests(unittest.TestCase):
    def setUp(self) -> None:
        self.transactions = [
            make_txn("m", "100", "expense", date(2024, 3, 5)),
            make_txn("a", "200", "expense", date(2024, 4, 5)),
            make_txn("i", "1000", "income", date(2024, 4, 25)),
            make_txn("y1", "150", "expense", date(2024, 5, 5)),
            make_txn("y2", "40", "expense", date(2024, 5, 6)),
            make_txn("t", "500", "transfer", date(2024, 5, 7)),
        ]

    def test_monthly_expense_series(self) -> None:
        points = trend_analysis(self.transactions, date(2024, 3, 1), date(2024, 5, 31), "expenses")

        self.assertEqual([point.period for point in points], ["2024-03", "2024-04", "2024-05"])
        self.assertEqual([point.value for point in points], [Decimal("100"), Decimal("200"), Decimal("190")])
        self.assertEqual([point.trend for point in points], ["stable", "up", "stable"])
        self.assertEqual(points[0].change_percent, Decimal("0"))
        self.assertEqual(points[1].change_percent, Decimal("100"))
        self.assertEqual(points[2].change, Decimal("-10"))
        self.assertEqual(points[2].change_percent, Decimal("-5"))

    def test_savings_metric_nets_income_and_expenses(self) -> None:
        points = trend_analysis(self.transactions, date(2024, 3, 1), date(2024, 5, 31), "savings")

        self.assertEqual([point.value for point in points], [Decimal("-100"), Decimal("800"), Decimal("-190")])
        self.assertEqual(points[2].trend, "down")

    def test_unknown_metric_raises(self) -> None:
        with self.assertRaises(ValueError):
            trend_analysis(self.transactions, date(2024, 3, 1), date(2024, 5, 31), "net_worth")


class PredictiveAnalyticsTests(unittest.TestCase):
    def test_extrapolates_recent_average_change(self) -> None:
        transactions = [
            make_txn("m", "100", "income", date(2024, 3, 1)),
            make_txn("a", "200", "income", date(2024, 4, 1)),
            make_txn("y", "300", "income", date(2024, 5, 1)),
        ]

        predictions = predictive_analytics(transactions, date(2024, 5, 1), date(2024, 5, 31), "income")

        self.assertEqual([item.period for item in predictions], ["2024-06", "2024-07", "2024-08"])
        self.assertEqual([item.predicted for item in predictions], [Decimal("400"), Decimal("500"), Decimal("600")])
        self.assertEqual(predictions[0].trend, "increasing")
        self.assertEqual(predictions[0].confidence, Decimal("30"))
        self.assertEqual(predictions[0].factors, ["Salary trends", "Bonus patterns", "Investment returns"])

    def test_short_histories(self) -> None:
        self.assertEqual(predict_value([], 1), Decimal("0"))
        self.assertEqual(predict_value([Decimal("5")], 2), Decimal("5"))
        self.assertEqual(prediction_confidence([Decimal("1"), Decimal("2")]), Decimal("50"))
        self.assertEqual(predicted_trend([Decimal("5")]), "stable")

    def test_steady_series_is_confident_and_stable(self) -> None:
        values = [Decimal("100")] * 6

        self.assertEqual(prediction_confidence(values), Decimal("95"))
        self.assertEqual(predicted_trend(values), "stable")


if __name__ == "__main__":
    unittest.main()
