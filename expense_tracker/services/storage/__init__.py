"""
Storage Services Package

Provides the abstract key-value interface and its concrete backends.
JSON files are the default; memory is for tests; Google Sheets is optional.
"""

from typing import Optional

from expense_tracker.config import AppSettings, get_settings
from expense_tracker.services.storage.interface import (
    CATEGORIES,
    CURRENT_USER,
    EXPENSES,
    SETTINGS,
    USERS,
    ConnectionError,
    CorruptDataError,
    KeyValueStorage,
    StorageError,
    make_key,
)
from expense_tracker.services.storage.memory import InMemoryStorage
from expense_tracker.services.storage.json_files import JsonFileStorage
from expense_tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsStorage,
)


def create_storage(app_settings: Optional[AppSettings] = None) -> KeyValueStorage:
    """Build the backend selected by ``storage_backend``."""
    app_settings = app_settings or get_settings().app

    if app_settings.storage_backend == "memory":
        return InMemoryStorage()
    if app_settings.storage_backend == "google_sheets":
        return GoogleSheetsStorage()
    return JsonFileStorage(app_settings.data_dir)


__all__ = [
    # Interface
    "KeyValueStorage",
    "make_key",
    "create_storage",
    # Collections
    "CATEGORIES",
    "CURRENT_USER",
    "EXPENSES",
    "SETTINGS",
    "USERS",
    # Exceptions
    "ConnectionError",
    "CorruptDataError",
    "StorageError",
    # Backends
    "InMemoryStorage",
    "JsonFileStorage",
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
]
