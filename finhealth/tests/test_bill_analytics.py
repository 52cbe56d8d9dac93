import unittest
from datetime import date
from decimal import Decimal

from finhealth.bill_analytics import bill_analytics
from finhealth.entities import Bill, Snapshot, Transaction

TODAY = date(2024, 6, 15)
START = date(2024, 1, 1)
END = date(2024, 6, 30)


def make_bill(bill_id, due_date):
    return Bill(
        id=bill_id,
        name=f"Bill {bill_id}",
        amount=Decimal("80"),
        currency_code="USD",
        due_date=due_date,
        assigned_account="chk",
    )


def make_payment(txn_id, bill_id, txn_date, status="completed", amount="80"):
    return Transaction(
        id=txn_id,
        date=txn_date,
        amount=Decimal(amount),
        type="expense",
        account_id="chk",
        currency_code="USD",
        category="Utilities",
        status=status,
        linked_bill_id=bill_id,
    )


class BillAnalyticsTests(unittest.TestCase):
    def test_status_follows_latest_payment(self) -> None:
        bills = [
            make_bill("paid", date(2024, 6, 1)),
            make_bill("failed", date(2024, 6, 1)),
            make_bill("moved", date(2024, 6, 1)),
        ]
        transactions = [
            make_payment("p1", "paid", date(2024, 5, 1), status="failed"),
            make_payment("p2", "paid", date(2024, 6, 1)),
            make_payment("f1", "failed", date(2024, 5, 1)),
            make_payment("f2", "failed", date(2024, 6, 2), status="failed"),
            make_payment("m1", "moved", date(2024, 6, 3), status="pending"),
        ]

        result = {
            item.bill_id: item.status
            for item in bill_analytics(Snapshot(transactions=transactions, bills=bills), START, END, TODAY)
        }

        self.assertEqual(result, {"paid": "paid", "failed": "failed", "moved": "moved"})

    def test_unpaid_bills_are_overdue_or_upcoming_by_due_date(self) -> None:
        bills = [make_bill("late", date(2024, 6, 10)), make_bill("soon", date(2024, 6, 20))]

        result = {
            item.bill_id: item.status
            for item in bill_analytics(Snapshot(bills=bills), START, END, TODAY)
        }

        self.assertEqual(result, {"late": "overdue", "soon": "upcoming"})

    def test_payment_history_and_monthly_trend_within_range(self) -> None:
        bills = [make_bill("b1", date(2024, 7, 1))]
        transactions = [
            make_payment("p0", "b1", date(2023, 12, 20)),
            make_payment("p1", "b1", date(2024, 4, 2), amount="75"),
            make_payment("p2", "b1", date(2024, 5, 2), status="failed"),
            make_payment("p3", "b1", date(2024, 5, 9)),
        ]

        result = bill_analytics(Snapshot(transactions=transactions, bills=bills), START, END, TODAY)[0]

        self.assertEqual([payment.transaction_id for payment in result.payment_history], ["p1", "p2", "p3"])
        self.assertEqual([month.month for month in result.monthly_trend], ["2024-04", "2024-05"])
        self.assertEqual(result.monthly_trend[1].amount, Decimal("160"))
        self.assertEqual(result.monthly_trend[1].status, "paid")
        self.assertEqual(result.assigned_account, "chk")


if __name__ == "__main__":
    unittest.main()
