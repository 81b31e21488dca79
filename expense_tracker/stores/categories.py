"""Per-user category store."""

from __future__ import annotations

from expense_tracker.models import Category, CategoryColor, uncategorized
from expense_tracker.services.storage import CATEGORIES
from expense_tracker.stores.base import CollectionStore


DEFAULT_CATEGORIES = [
    ("food", "Food & Dining", CategoryColor.GREEN),
    ("transportation", "Transportation", CategoryColor.BLUE),
    ("utilities", "Utilities", CategoryColor.PURPLE),
    ("entertainment", "Entertainment", CategoryColor.PINK),
    ("shopping", "Shopping", CategoryColor.ORANGE),
    ("health", "Health & Medical", CategoryColor.RED),
    ("education", "Education", CategoryColor.YELLOW),
    ("travel", "Travel", CategoryColor.TEAL),
]


def default_categories() -> list[Category]:
    return [
        Category(id=category_id, name=name, color=color)
        for category_id, name, color in DEFAULT_CATEGORIES
    ]


class CategoryStore(CollectionStore[Category]):
    """
    One user's categories.

    Deleting a category never touches expenses that reference it; those
    resolve to the Uncategorized fallback when displayed.
    """

    collection = CATEGORIES
    entity_type = "category"
    record_model = Category

    def _default_records(self) -> list[Category]:
        return default_categories()

    def resolve(self, category_id: str) -> Category:
        """The category with this id, or the Uncategorized/gray fallback."""
        return self.get(category_id) or uncategorized(category_id)
