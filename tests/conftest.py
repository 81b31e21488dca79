"""
Shared fixtures.

Everything runs against in-memory storage with a fixed clock; no test
touches the network or the real data directory.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.identity import Session
from expense_tracker.models import Category, CategoryColor, Expense, User
from expense_tracker.services.storage import InMemoryStorage, StorageError
from expense_tracker.stores import CategoryStore, ExpenseStore, SettingsStore


FIXED_NOW = datetime(2023, 6, 20, 12, 0, 0)


class FlakyStorage(InMemoryStorage):
    """In-memory storage that can be told to fail for chosen collections."""

    def __init__(self):
        super().__init__()
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()

    @staticmethod
    def _matches(key: str, collections: set[str]) -> bool:
        return any(key == c or key.startswith(f"{c}-") for c in collections)

    def read(self, key: str) -> Optional[Any]:
        if self._matches(key, self.fail_reads):
            raise StorageError(f"read refused for {key}")
        return super().read(key)

    def write(self, key: str, value: Any) -> None:
        if self._matches(key, self.fail_writes):
            raise StorageError(f"write refused for {key}")
        super().write(key, value)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def flaky_storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def session() -> Session:
    return Session(user=User(id="user-1", name="Asha", email="asha@example.com"))


@pytest.fixture
def other_session() -> Session:
    return Session(user=User(id="user-2", name="Ravi", email="ravi@example.com"))


@pytest.fixture
def expense_store(storage, session, audit_logger, now) -> ExpenseStore:
    return ExpenseStore(storage, session, audit_logger, clock=lambda: now)


@pytest.fixture
def category_store(storage, session, audit_logger) -> CategoryStore:
    return CategoryStore(storage, session, audit_logger)


@pytest.fixture
def settings_store(storage, session, expense_store, category_store, audit_logger, tmp_path, now) -> SettingsStore:
    return SettingsStore(
        storage,
        session,
        expense_store,
        category_store,
        audit_logger,
        export_dir=tmp_path / "exports",
        clock=lambda: now,
    )


@pytest.fixture
def make_expense():
    """Factory for expenses with sensible defaults."""
    counter = {"n": 0}

    def _make(amount, category="food", when=FIXED_NOW, description=None) -> Expense:
        counter["n"] += 1
        return Expense(
            id=f"exp-{counter['n']}",
            description=description or f"Expense {counter['n']}",
            amount=Decimal(str(amount)),
            category=category,
            date=when,
        )

    return _make


@pytest.fixture
def categories() -> list[Category]:
    return [
        Category(id="food", name="Food & Dining", color=CategoryColor.GREEN),
        Category(id="transport", name="Transportation", color=CategoryColor.BLUE),
    ]
