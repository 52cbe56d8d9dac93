import unittest
from datetime import date
from decimal import Decimal

from finhealth.category_analytics import category_analytics
from finhealth.entities import Transaction


def make_txn(txn_id, amount, txn_type, category, txn_date, account_id="acc-1", currency="USD"):
    return Transaction(
        id=txn_id,
        date=txn_date,
        amount=Decimal(amount),
        type=txn_type,
        account_id=account_id,
        currency_code=currency,
        category=category,
    )


class CategoryAnalyticsTests(unittest.TestCase):
    def test_expense_shares_within_expense_group(self) -> None:
        transactions = [
            make_txn("t1", "40", "expense", "Food & Dining", date(2024, 5, 3)),
            make_txn("t2", "60", "expense", "Food & Dining", date(2024, 5, 10)),
            make_txn("t3", "2500", "income", "Salary", date(2024, 5, 1)),
        ]

        result = category_analytics(transactions, date(2024, 5, 1), date(2024, 5, 31))
        food = next(item for item in result if item.category == "Food & Dining")

        self.assertEqual(food.total_amount, Decimal("100"))
        self.assertEqual(food.percentage, Decimal("100"))
        self.assertEqual(food.transaction_count, 2)
        self.assertEqual(food.average_amount, Decimal("50"))
        self.assertEqual(food.trend, "stable")
        self.assertEqual(food.type, "expense")
        self.assertEqual([point.month for point in food.monthly_trend], ["2024-05"])

    def test_sorted_by_total_and_shares_sum_to_hundred(self) -> None:
        transactions = [
            make_txn("t1", "30", "expense", "Transport", date(2024, 5, 2)),
            make_txn("t2", "45.50", "expense", "Groceries", date(2024, 5, 3)),
            make_txn("t3", "12.25", "expense", None, date(2024, 5, 4)),
            make_txn("t4", "7", "expense", "Transport", date(2024, 5, 5)),
        ]

        result = category_analytics(transactions, date(2024, 5, 1), date(2024, 5, 31))

        self.assertEqual([item.category for item in result], ["Groceries", "Transport", "Other"])
        total = sum(item.percentage for item in result)
        self.assertLess(abs(total - Decimal("100")), Decimal("0.001"))

    def test_mixed_types_sum_to_hundred_per_type(self) -> None:
        transactions = [
            make_txn("t1", "100", "expense", "Rent", date(2024, 5, 2)),
            make_txn("t2", "25", "expense", "Transport", date(2024, 5, 3)),
            make_txn("t3", "500", "income", "Salary", date(2024, 5, 1)),
            make_txn("t4", "300", "income", "Bonus", date(2024, 5, 20)),
        ]

        result = category_analytics(transactions, date(2024, 5, 1), date(2024, 5, 31))

        shares = {item.category: item.percentage for item in result}
        self.assertEqual(shares["Rent"], Decimal("80"))
        self.assertEqual(shares["Transport"], Decimal("20"))
        self.assertEqual(shares["Salary"], Decimal("62.5"))
        self.assertEqual(shares["Bonus"], Decimal("37.5"))
        for txn_type in ("expense", "income"):
            total = sum(item.percentage for item in result if item.type == txn_type)
            self.assertEqual(total, Decimal("100"))

    def test_trend_compares_last_two_months(self) -> None:
        transactions = [
            make_txn("t1", "100", "expense", "Rent", date(2024, 4, 1)),
            make_txn("t2", "120", "expense", "Rent", date(2024, 5, 1)),
            make_txn("t3", "100", "expense", "Fuel", date(2024, 4, 2)),
            make_txn("t4", "80", "expense", "Fuel", date(2024, 5, 2)),
            make_txn("t5", "100", "expense", "Phone", date(2024, 4, 3)),
            make_txn("t6", "105", "expense", "Phone", date(2024, 5, 3)),
        ]

        result = {
            item.category: item.trend
            for item in category_analytics(transactions, date(2024, 4, 1), date(2024, 5, 31))
        }

        self.assertEqual(result, {"Rent": "up", "Fuel": "down", "Phone": "stable"})

    def test_filters_by_range_account_and_currency(self) -> None:
        transactions = [
            make_txn("t1", "10", "expense", "Food", date(2024, 5, 3)),
            make_txn("t2", "20", "expense", "Food", date(2024, 5, 3), account_id="acc-2"),
            make_txn("t3", "30", "expense", "Food", date(2024, 5, 3), currency="EUR"),
            make_txn("t4", "40", "expense", "Food", date(2024, 6, 1)),
        ]

        result = category_analytics(
            transactions,
            date(2024, 5, 1),
            date(2024, 5, 31),
            account_id="acc-1",
            currency="USD",
        )

        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].total_amount, Decimal("10"))

    def test_zero_totals_report_zero_share(self) -> None:
        transactions = [make_txn("t1", "0", "expense", "Food", date(2024, 5, 3))]

        result = category_analytics(transactions, date(2024, 5, 1), date(2024, 5, 31))

        self.assertEqual(result[0].percentage, Decimal("0"))
        self.assertEqual(result[0].average_amount, Decimal("0"))

    def test_inverted_range_raises(self) -> None:
        with self.assertRaises(ValueError):
            category_analytics([], date(2024, 6, 1), date(2024, 5, 1))


if __name__ == "__main__":
    unittest.main()
