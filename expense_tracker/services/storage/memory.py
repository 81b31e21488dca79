"""
In-Memory Storage

Dict-backed storage for tests and throwaway sessions. Values are kept as
JSON text so a caller mutating what it read never changes what is stored,
and so anything that would not survive a real backend fails here too.
"""

import json
from typing import Any, Optional

from expense_tracker.services.storage.interface import (
    CorruptDataError,
    KeyValueStorage,
    StorageError,
)


class InMemoryStorage(KeyValueStorage):
    """Key-value storage held in a process-local dict."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.write(key, value)

    def read(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Stored value for {key} is not valid JSON: {e}")

    def write(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON-serializable: {e}")

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def write_raw(self, key: str, raw: str) -> None:
        """Store text as-is, bypassing serialization."""
        self._data[key] = raw

    def keys(self) -> list[str]:
        return sorted(self._data)
