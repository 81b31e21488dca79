"""Per-user expense store."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.identity import Session
from expense_tracker.models import Expense, utc_now
from expense_tracker.reports.periods import shift_months
from expense_tracker.services.storage import EXPENSES, KeyValueStorage
from expense_tracker.stores.base import CollectionStore


def sample_expenses(now: datetime) -> list[Expense]:
    """Eight example expenses spread over the last month, for new users."""
    yesterday = now - timedelta(days=1)
    last_week = now - timedelta(days=7)
    last_month = shift_months(now, -1)

    rows = [
        ("Grocery shopping", "2575", "food", yesterday, "Weekly grocery run"),
        ("Electricity bill", "1850", "utilities", last_week, None),
        ("Movie tickets", "600", "entertainment", now, "Weekend movie with friends"),
        ("Petrol", "1200", "transportation", yesterday, None),
        ("Dinner at restaurant", "1450", "food", last_week, "Anniversary dinner"),
        ("Internet subscription", "999", "utilities", last_month, None),
        ("Mobile recharge", "499", "utilities", last_week, None),
        ("Clothes shopping", "3200", "shopping", last_month, None),
    ]
    return [
        Expense(
            description=description,
            amount=Decimal(amount),
            category=category,
            date=when,
            notes=notes,
        )
        for description, amount, category, when, notes in rows
    ]


class ExpenseStore(CollectionStore[Expense]):
    """
    One user's expenses.

    New users get ``sample_expenses`` unless seeding is turned off.
    """

    collection = EXPENSES
    entity_type = "expense"
    record_model = Expense

    def __init__(
        self,
        storage: KeyValueStorage,
        session: Session,
        audit_logger: Optional[AuditLogger] = None,
        seed_sample_data: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(storage, session, audit_logger)
        self._seed_sample_data = seed_sample_data
        self._clock = clock

    def _default_records(self) -> list[Expense]:
        if not self._seed_sample_data:
            return []
        return sample_expenses(self._clock())
