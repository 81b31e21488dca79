"""
Services Package

External collaborators of the stores. Currently only persistence.
"""

from expense_tracker.services.storage import (
    GoogleSheetsStorage,
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorage,
    StorageError,
    create_storage,
)

__all__ = [
    "GoogleSheetsStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "StorageError",
    "create_storage",
]
