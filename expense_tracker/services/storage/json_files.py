"""
JSON File Storage

One JSON file per key under a data directory. This is the default backend:
no setup, and the files are easy to inspect or back up by hand.

Writes are atomic: the value goes to a temporary file in the same directory
which then replaces the target, so a crash mid-write never leaves a
half-written collection behind.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from expense_tracker.services.storage.interface import (
    CorruptDataError,
    KeyValueStorage,
    StorageError,
)


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStorage(KeyValueStorage):
    """Key-value storage backed by ``{data_dir}/{key}.json`` files."""

    def __init__(self, data_dir: Union[str, Path]):
        # No I/O here; the directory is created on first write.
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key) or key in {".", ".."}:
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Corrupt JSON in {path}: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def write(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        tmp_path: Optional[str] = None
        try:
            text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON-serializable: {e}")

        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="wb", delete=False, dir=self._data_dir, suffix=".tmp"
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(text.encode("utf-8"))
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to remove {path}: {e}")
