import unittest
from datetime import date
from decimal import Decimal

from finhealth.calendar_events import calendar_events
from finhealth.entities import Bill, Goal, Snapshot, Transaction


class CalendarEventsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.snapshot = Snapshot(
            transactions=[
                Transaction(
                    id="t2",
                    date=date(2024, 5, 20),
                    amount=Decimal("300"),
                    type="income",
                    account_id="chk",
                    currency_code="USD",
                    description="Paycheck",
                ),
                Transaction(
                    id="t1",
                    date=date(2024, 5, 2),
                    amount=Decimal("100"),
                    type="transfer",
                    account_id="chk",
                    currency_code="USD",
                    description="To savings",
                    linked_goal_id="g1",
                ),
                Transaction(
                    id="t0",
                    date=date(2024, 4, 30),
                    amount=Decimal("5"),
                    type="expense",
                    account_id="chk",
                    currency_code="USD",
                ),
                Transaction(
                    id="t3",
                    date=date(2024, 5, 9),
                    amount=Decimal("10"),
                    type="expense",
                    account_id="chk",
                    currency_code="USD",
                    linked_goal_id="ghost",
                ),
            ],
            goals=[
                Goal(
                    id="g1",
                    name="Vacation",
                    current_amount=Decimal("100"),
                    target_amount=Decimal("1000"),
                    currency_code="USD",
                )
            ],
            bills=[
                Bill(
                    id="b1",
                    name="Internet",
                    amount=Decimal("60"),
                    currency_code="USD",
                    due_date=date(2024, 5, 10),
                ),
                Bill(
                    id="b2",
                    name="Insurance",
                    amount=Decimal("90"),
                    currency_code="USD",
                    due_date=date(2024, 6, 10),
                ),
            ],
        )

    def test_merges_sources_in_date_order(self) -> None:
        events = calendar_events(self.snapshot, date(2024, 5, 1), date(2024, 5, 31))

        self.assertEqual(
            [event.id for event in events],
            ["transaction-t1", "goal-t1", "transaction-t3", "bill-b1", "transaction-t2"],
        )
        dates = [event.date for event in events]
        self.assertEqual(dates, sorted(dates))

    def test_colors_and_goal_labels(self) -> None:
        events = {event.id: event for event in calendar_events(self.snapshot, date(2024, 5, 1), date(2024, 5, 31))}

        self.assertEqual(events["transaction-t2"].color, "green")
        self.assertEqual(events["transaction-t3"].color, "red")
        self.assertEqual(events["bill-b1"].color, "orange")
        self.assertEqual(events["bill-b1"].status, "upcoming")
        self.assertEqual(events["goal-t1"].color, "blue")
        self.assertEqual(events["goal-t1"].title, "Goal: Vacation")
        self.assertNotIn("goal-t3", events)

    def test_empty_range_returns_no_events(self) -> None:
        self.assertEqual(calendar_events(self.snapshot, date(2023, 1, 1), date(2023, 1, 31)), [])


if __name__ == "__main__":
    unittest.main()
