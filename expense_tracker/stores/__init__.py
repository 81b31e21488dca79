"""Per-user stores: expenses, categories and settings."""

from expense_tracker.stores.base import CollectionStore, normalize_fields
from expense_tracker.stores.categories import (
    DEFAULT_CATEGORIES,
    CategoryStore,
    default_categories,
)
from expense_tracker.stores.expenses import ExpenseStore, sample_expenses
from expense_tracker.stores.settings import SettingsStore, backup_file_name

__all__ = [
    "CollectionStore",
    "normalize_fields",
    "DEFAULT_CATEGORIES",
    "CategoryStore",
    "default_categories",
    "ExpenseStore",
    "sample_expenses",
    "SettingsStore",
    "backup_file_name",
]
