"""
Abstract Key-Value Storage Interface

DESIGN DECISION: Every store talks to persistence through one small
key-value interface. This allows us to:
1. Swap the JSON-file backend for Google Sheets or a real database
2. Use in-memory storage for testing
3. Keep aggregation and store logic decoupled from the backend

Keys are flat strings. Per-user collections are namespaced as
``{collection}-{user_id}``; global collections (``users``, ``user``) use the
bare collection name. Values are JSON-serializable structures.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


# Collection names
USERS = "users"
CURRENT_USER = "user"
EXPENSES = "expenses"
CATEGORIES = "categories"
SETTINGS = "settings"


def make_key(user_id: Optional[str], collection: str) -> str:
    """Storage key for a collection, namespaced by user when one is given."""
    if user_id is None:
        return collection
    return f"{collection}-{user_id}"


class KeyValueStorage(ABC):
    """
    Abstract interface for key-value persistence.

    Backends implement ``read``/``write``/``remove`` on raw keys; callers
    normally use ``get``/``put``/``delete`` with a user id and a collection.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[Any]:
        """
        Read the value stored under a key.

        Returns:
            The parsed value, or None if the key has never been written

        Raises:
            CorruptDataError: If the stored value cannot be parsed
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """
        Replace the value stored under a key.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key. Removing a missing key is not an error."""
        pass

    def get(self, user_id: Optional[str], collection: str) -> Optional[Any]:
        return self.read(make_key(user_id, collection))

    def put(self, user_id: Optional[str], collection: str, value: Any) -> None:
        self.write(make_key(user_id, collection), value)

    def delete(self, user_id: Optional[str], collection: str) -> None:
        self.remove(make_key(user_id, collection))


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """A stored value exists but is not valid JSON."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
