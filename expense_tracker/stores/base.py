"""
Collection Store Base

Shared machinery for the per-user expense and category stores.

Lifecycle: unloaded -> loaded (or seeded) -> mutated*. A store loads lazily
on first access; ``is_loading`` stays True until that happens so a caller can
hold off rendering. Every mutation rewrites the whole collection.

Error policy:
- invalid input to ``add``/``update`` raises pydantic's ValidationError
  before anything changes
- ``update``/``delete`` of an unknown id is a silent no-op
- storage failures are logged and never raised; an unreadable collection
  loads as empty
"""

from __future__ import annotations

from typing import Any, Generic, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError

from expense_tracker.audit import AuditLogger, get_logger
from expense_tracker.identity import Session
from expense_tracker.models import AuditEventBuilder, new_id
from expense_tracker.services.storage import KeyValueStorage, StorageError


RecordT = TypeVar("RecordT", bound=BaseModel)

Fields = Union[BaseModel, Mapping[str, Any]]


def normalize_fields(model: type[BaseModel], fields: Optional[Fields]) -> dict[str, Any]:
    """
    Turn user-supplied fields into a dict keyed by attribute name.

    Accepts a model (only explicitly set fields count) or a mapping keyed
    by attribute names or their camelCase aliases.
    """
    if fields is None:
        return {}
    if isinstance(fields, BaseModel):
        return fields.model_dump(exclude_unset=True)

    by_alias = {
        info.alias: name
        for name, info in model.model_fields.items()
        if info.alias
    }
    normalized = {}
    for key, value in fields.items():
        name = key if key in model.model_fields else by_alias.get(key, key)
        normalized[name] = value
    return normalized


class CollectionStore(Generic[RecordT]):
    """
    CRUD over one user's collection of records.

    Subclasses set ``collection``, ``entity_type`` and ``record_model`` and
    provide the first-use seed via ``_default_records``.
    """

    collection: str = ""
    entity_type: str = ""
    record_model: type[BaseModel]

    def __init__(
        self,
        storage: KeyValueStorage,
        session: Session,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._session = session
        self._audit = audit_logger or AuditLogger()
        self._log = get_logger(f"expense_tracker.stores.{self.entity_type}")
        self._records: list[RecordT] = []
        self._is_loading = True

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def user_id(self) -> str:
        return self._session.user_id

    def _default_records(self) -> list[RecordT]:
        raise NotImplementedError

    # -- loading -------------------------------------------------------------

    def load(self) -> None:
        """Read the collection, seeding it if this user has none yet."""
        try:
            raw = self._storage.get(self.user_id, self.collection)
        except StorageError as e:
            self._audit.log_storage_failure("read", self.user_id, self.collection, e)
            raw = []

        if raw is None:
            self._records = self._default_records()
            self._persist()
            self._audit.log(AuditEventBuilder.store_seeded(
                self.collection, self.user_id, len(self._records)
            ))
        else:
            self._records = self._parse(raw)

        self._is_loading = False

    def reload(self) -> None:
        """Drop the cached collection and read it again."""
        self._is_loading = True
        self.load()

    def _ensure_loaded(self) -> None:
        if self._is_loading:
            self.load()

    def _parse(self, raw: Any) -> list[RecordT]:
        if not isinstance(raw, list):
            self._audit.log_error(
                "invalid_collection",
                f"Expected a list for {self.collection}, got {type(raw).__name__}",
                user_id=self.user_id,
            )
            return []

        records = []
        for entry in raw:
            try:
                records.append(self.record_model.model_validate(entry))
            except ValidationError as e:
                # Skip the bad record, keep the rest
                self._audit.log_error(
                    "invalid_record",
                    str(e),
                    details={"collection": self.collection},
                    user_id=self.user_id,
                )
        return records

    def _persist(self) -> None:
        try:
            self._storage.put(
                self.user_id,
                self.collection,
                [record.to_json_dict() for record in self._records],
            )
        except StorageError as e:
            self._audit.log_storage_failure("write", self.user_id, self.collection, e)

    # -- reads ---------------------------------------------------------------

    def list(self) -> list[RecordT]:
        """Current records, in no particular order."""
        self._ensure_loaded()
        return [record.model_copy(deep=True) for record in self._records]

    def get(self, record_id: str) -> Optional[RecordT]:
        self._ensure_loaded()
        for record in self._records:
            if record.id == record_id:
                return record.model_copy(deep=True)
        return None

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._records)

    # -- mutations -----------------------------------------------------------

    def add(self, new_record: Fields) -> RecordT:
        """
        Validate and append a record under a freshly assigned id.

        Raises:
            ValidationError: If the fields do not form a valid record
        """
        self._ensure_loaded()
        data = normalize_fields(self.record_model, new_record)
        data["id"] = new_id()
        record = self.record_model.model_validate(data)

        self._records.append(record)
        self._persist()
        self._audit.log(AuditEventBuilder.record_added(self.entity_type, self.user_id, record.id))
        return record.model_copy(deep=True)

    def update(self, record_id: str, fields: Optional[Fields] = None, **changes: Any) -> None:
        """
        Merge fields into an existing record.

        Only the given fields change; the id never does. Unknown ids are
        ignored.

        Raises:
            ValidationError: If the merged record is invalid
        """
        self._ensure_loaded()
        updates = normalize_fields(self.record_model, fields)
        updates.update(normalize_fields(self.record_model, changes))
        updates.pop("id", None)

        for idx, record in enumerate(self._records):
            if record.id == record_id:
                merged = self.record_model.model_validate({**record.model_dump(), **updates})
                self._records[idx] = merged
                self._persist()
                self._audit.log(AuditEventBuilder.record_updated(
                    self.entity_type, self.user_id, record_id, sorted(updates)
                ))
                return

        self._log.debug("update_target_missing", record_id=record_id, user_id=self.user_id)

    def delete(self, record_id: str) -> None:
        """Remove a record if present; deleting twice is harmless."""
        self._ensure_loaded()
        remaining = [record for record in self._records if record.id != record_id]
        if len(remaining) == len(self._records):
            self._log.debug("delete_target_missing", record_id=record_id, user_id=self.user_id)
            return

        self._records = remaining
        self._persist()
        self._audit.log(AuditEventBuilder.record_deleted(self.entity_type, self.user_id, record_id))
