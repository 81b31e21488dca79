"""
Tests for the settings store: preferences, formatting and backup.
"""

import json
from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from expense_tracker.models import DateFormat
from expense_tracker.services.storage import CATEGORIES, EXPENSES, SETTINGS
from expense_tracker.stores import CategoryStore, ExpenseStore, SettingsStore


def snapshot(expense_store, category_store, settings_store):
    """Order-insensitive view of everything a backup covers."""
    return (
        {e.id: e for e in expense_store.list()},
        {c.id: c for c in category_store.list()},
        settings_store.get(),
    )


@pytest.fixture
def other_settings_store(storage, other_session, audit_logger, tmp_path, now):
    expenses = ExpenseStore(storage, other_session, audit_logger, seed_sample_data=False)
    categories = CategoryStore(storage, other_session, audit_logger)
    return SettingsStore(storage, other_session, expenses, categories, audit_logger, export_dir=tmp_path)


class TestPreferences:
    """Tests for get/update."""

    def test_defaults_are_persisted(self, settings_store, storage, session):
        settings = settings_store.get()
        assert settings.currency == "₹"
        assert settings.monthly_budget == Decimal("20000")
        assert storage.get(session.user_id, SETTINGS)["dateFormat"] == "DD/MM/YYYY"

    def test_update_merges(self, settings_store):
        updated = settings_store.update(currency="$")
        assert updated.currency == "$"
        assert updated.date_format == DateFormat.DAY_FIRST
        assert updated.monthly_budget == Decimal("20000")

    def test_update_accepts_camel_case_mapping(self, settings_store, storage, session):
        settings_store.update({"dateFormat": "YYYY-MM-DD", "monthlyBudget": 15000})
        stored = storage.get(session.user_id, SETTINGS)
        assert stored["dateFormat"] == "YYYY-MM-DD"
        assert stored["monthlyBudget"] == 15000

    def test_invalid_update_changes_nothing(self, settings_store):
        with pytest.raises(ValidationError):
            settings_store.update(monthly_budget=-5)
        assert settings_store.get().monthly_budget == Decimal("20000")

    def test_unknown_stored_date_format_keeps_other_fields(self, storage, session, expense_store, category_store):
        storage.put(session.user_id, SETTINGS, {
            "currency": "$",
            "dateFormat": "DD.MM.YYYY",
            "monthlyBudget": 5000,
            "darkMode": True,
        })
        store = SettingsStore(storage, session, expense_store, category_store)
        settings = store.get()
        assert settings.date_format == DateFormat.DAY_FIRST
        assert settings.currency == "$"
        assert settings.monthly_budget == Decimal("5000")
        assert settings.dark_mode is True
        assert store.format_date("2023-06-05") == "05/06/2023"

    def test_invalid_stored_settings_fall_back_to_defaults(self, storage, session, expense_store, category_store):
        storage.put(session.user_id, SETTINGS, {"monthlyBudget": -1, "currency": "$"})
        store = SettingsStore(storage, session, expense_store, category_store)
        assert store.get().monthly_budget == Decimal("20000")


class TestFormatting:
    """Tests for formatting bound to the current settings."""

    def test_format_currency_uses_symbol(self, settings_store):
        assert settings_store.format_currency(100000) == "₹1,00,000"
        settings_store.update(currency="$")
        assert settings_store.format_currency(Decimal("1234.50")) == "$1,234.5"

    def test_format_date_follows_setting(self, settings_store):
        assert settings_store.format_date("2023-06-05T10:00:00.000Z") == "05/06/2023"
        settings_store.update(date_format=DateFormat.ISO)
        assert settings_store.format_date("2023-06-05T10:00:00.000Z") == "2023-06-05"


class TestExport:
    """Tests for export_data/export_to_file."""

    def test_export_has_three_sections(self, settings_store):
        document = json.loads(settings_store.export_data())
        assert set(document) == {"expenses", "categories", "settings"}
        assert len(document["expenses"]) == 8
        assert len(document["categories"]) == 8
        assert document["settings"]["currency"] == "₹"

    def test_export_to_file_name(self, settings_store, tmp_path):
        path = settings_store.export_to_file()
        assert path == tmp_path / "exports" / "expense-tracker-backup-2023-06-20.json"
        assert json.loads(path.read_text(encoding="utf-8"))["settings"]["dateFormat"] == "DD/MM/YYYY"

    def test_export_to_explicit_directory(self, settings_store, tmp_path):
        path = settings_store.export_to_file(tmp_path / "elsewhere")
        assert path.parent == tmp_path / "elsewhere"


class TestImport:
    """Tests for import_data."""

    def test_round_trip_restores_snapshot(self, settings_store, expense_store, category_store):
        settings_store.update(currency="€", monthly_budget=5000)
        before = snapshot(expense_store, category_store, settings_store)
        exported = settings_store.export_data()

        expense_store.delete(expense_store.list()[0].id)
        category_store.delete("food")
        settings_store.update(currency="$")

        assert settings_store.import_data(exported) is True
        assert snapshot(expense_store, category_store, settings_store) == before

    def test_round_trip_with_sub_millisecond_clock(self, storage, session):
        """Seeded dates carrying microseconds survive export and import unchanged."""
        def clock():
            return datetime(2023, 6, 20, 12, 0, 0, 654321)

        expenses = ExpenseStore(storage, session, clock=clock)
        categories = CategoryStore(storage, session)
        store = SettingsStore(storage, session, expenses, categories, clock=clock)

        before = snapshot(expenses, categories, store)
        assert store.import_data(store.export_data()) is True
        assert snapshot(expenses, categories, store) == before

    def test_import_into_another_user(self, settings_store, other_settings_store, storage, other_session):
        exported = settings_store.export_data()
        assert other_settings_store.import_data(exported) is True

        assert len(storage.get(other_session.user_id, EXPENSES)) == 8

    def test_import_reloads_live_stores(self, settings_store, expense_store, category_store):
        document = {
            "expenses": [{"id": "e1", "description": "Tea", "amount": 20, "category": "food", "date": "2023-06-05T08:00:00.000Z"}],
            "categories": [{"id": "food", "name": "Food", "color": "green"}],
            "settings": {"currency": "$", "dateFormat": "MM/DD/YYYY", "monthlyBudget": 1000},
        }
        expense_store.list()
        assert settings_store.import_data(document) is True

        assert [e.id for e in expense_store.list()] == ["e1"]
        assert [c.id for c in category_store.list()] == ["food"]
        assert settings_store.get().date_format == DateFormat.MONTH_FIRST

    def test_accepts_bytes(self, settings_store):
        exported = settings_store.export_data().encode("utf-8")
        assert settings_store.import_data(exported) is True

    def test_missing_categories_rejected(self, settings_store, expense_store, category_store, storage, session):
        """A document without categories changes nothing."""
        before = snapshot(expense_store, category_store, settings_store)
        stored_before = storage.get(session.user_id, EXPENSES)

        document = json.loads(settings_store.export_data())
        del document["categories"]
        document["expenses"] = []

        assert settings_store.import_data(json.dumps(document)) is False
        assert snapshot(expense_store, category_store, settings_store) == before
        assert storage.get(session.user_id, EXPENSES) == stored_before

    def test_invalid_json_rejected(self, settings_store):
        assert settings_store.import_data("not json at all") is False

    def test_invalid_record_rejected(self, settings_store, expense_store):
        document = json.loads(settings_store.export_data())
        document["expenses"][0]["amount"] = -1
        assert settings_store.import_data(document) is False
        assert len(expense_store.list()) == 8

    def test_non_document_rejected(self, settings_store):
        assert settings_store.import_data(["expenses"]) is False

    def test_write_failure_rolls_back(self, flaky_storage, session, now):
        expenses = ExpenseStore(flaky_storage, session, clock=lambda: now)
        categories = CategoryStore(flaky_storage, session)
        store = SettingsStore(flaky_storage, session, expenses, categories)
        exported = json.loads(store.export_data())
        exported["expenses"] = exported["expenses"][:1]
        stored_before = flaky_storage.get(session.user_id, EXPENSES)

        flaky_storage.fail_writes.add(CATEGORIES)
        assert store.import_data(exported) is False

        assert flaky_storage.get(session.user_id, EXPENSES) == stored_before
        assert len(expenses.list()) == 8


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
