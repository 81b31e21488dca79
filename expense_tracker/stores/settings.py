"""
Settings Store

One ``UserSettings`` record per user, plus display formatting bound to it
and whole-account backup: export of expenses, categories and settings as a
single JSON document, and import that replaces all three.

DESIGN DECISION: Import is all-or-nothing. The document is parsed and
validated completely before any key is written, and a storage failure part
way through restores the keys already overwritten. Callers only ever see
True or False.
"""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from expense_tracker.audit import AuditLogger, get_logger
from expense_tracker.identity import Session
from expense_tracker.models import (
    AuditEventBuilder,
    ExportDocument,
    UserSettings,
    utc_now,
)
from expense_tracker.reports import formatting
from expense_tracker.services.storage import (
    CATEGORIES,
    EXPENSES,
    SETTINGS,
    KeyValueStorage,
    StorageError,
)
from expense_tracker.stores.base import Fields, normalize_fields
from expense_tracker.stores.categories import CategoryStore
from expense_tracker.stores.expenses import ExpenseStore


BACKUP_FILE_PREFIX = "expense-tracker-backup"

logger = get_logger(__name__)


def backup_file_name(day: date) -> str:
    return f"{BACKUP_FILE_PREFIX}-{day.isoformat()}.json"


class SettingsStore:
    """
    The signed-in user's preferences and backup operations.

    The expense and category stores are the live views that import
    refreshes and export reads from.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        session: Session,
        expense_store: ExpenseStore,
        category_store: CategoryStore,
        audit_logger: Optional[AuditLogger] = None,
        export_dir: Optional[Path] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._storage = storage
        self._session = session
        self._expenses = expense_store
        self._categories = category_store
        self._audit = audit_logger or AuditLogger()
        self._export_dir = Path(export_dir) if export_dir is not None else Path("exports")
        self._clock = clock
        self._settings: Optional[UserSettings] = None

    @property
    def is_loading(self) -> bool:
        return self._settings is None

    @property
    def user_id(self) -> str:
        return self._session.user_id

    # -- settings ------------------------------------------------------------

    def load(self) -> None:
        try:
            raw = self._storage.get(self.user_id, SETTINGS)
        except StorageError as e:
            self._audit.log_storage_failure("read", self.user_id, SETTINGS, e)
            self._settings = UserSettings()
            return

        if raw is None:
            self._settings = UserSettings()
            self._persist()
            return

        try:
            self._settings = UserSettings.model_validate(raw)
        except ValidationError as e:
            self._audit.log_error(
                "invalid_settings_record",
                str(e),
                user_id=self.user_id,
            )
            self._settings = UserSettings()

    def _persist(self) -> None:
        try:
            self._storage.put(self.user_id, SETTINGS, self._settings.to_json_dict())
        except StorageError as e:
            self._audit.log_storage_failure("write", self.user_id, SETTINGS, e)

    def get(self) -> UserSettings:
        """Current settings, created with defaults on first use."""
        if self._settings is None:
            self.load()
        return self._settings.model_copy()

    def update(self, partial: Optional[Fields] = None, **changes: Any) -> UserSettings:
        """
        Merge a partial update into the settings.

        Raises:
            ValidationError: If the merged settings are invalid
        """
        current = self.get()
        updates = normalize_fields(UserSettings, partial)
        updates.update(normalize_fields(UserSettings, changes))

        self._settings = UserSettings.model_validate({**current.model_dump(), **updates})
        self._persist()
        self._audit.log(AuditEventBuilder.settings_updated(self.user_id, sorted(updates)))
        return self._settings.model_copy()

    # -- formatting ----------------------------------------------------------

    def format_currency(self, amount: Union[Decimal, int, float]) -> str:
        return formatting.format_currency(amount, self.get().currency)

    def format_date(self, value: Union[datetime, date, str]) -> str:
        return formatting.format_date(value, self.get().date_format)

    # -- export --------------------------------------------------------------

    def _export_document(self) -> ExportDocument:
        return ExportDocument(
            expenses=self._expenses.list(),
            categories=self._categories.list(),
            settings=self.get(),
        )

    def export_data(self) -> str:
        """The user's expenses, categories and settings as one JSON document."""
        document = self._export_document()
        self._audit.log(AuditEventBuilder.data_exported(
            self.user_id, len(document.expenses), len(document.categories)
        ))
        return document.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    def export_to_file(self, directory: Optional[Path] = None) -> Path:
        """
        Write the backup document to ``expense-tracker-backup-{date}.json``.

        Raises:
            OSError: If the directory cannot be created or written
        """
        target_dir = Path(directory) if directory is not None else self._export_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / backup_file_name(self._clock().date())
        path.write_text(self.export_data(), encoding="utf-8")
        logger.info("backup_written", path=str(path), user_id=self.user_id)
        return path

    # -- import --------------------------------------------------------------

    def import_data(self, document: Union[str, bytes, Mapping[str, Any]]) -> bool:
        """
        Replace this user's expenses, categories and settings from a backup.

        Returns False, leaving everything unchanged, when the document is not
        valid JSON, lacks any of its three sections, holds an invalid record,
        or cannot be written.
        """
        try:
            if isinstance(document, (str, bytes)):
                parsed = ExportDocument.model_validate_json(document)
            elif isinstance(document, Mapping):
                parsed = ExportDocument.model_validate(dict(document))
            else:
                parsed = ExportDocument.model_validate(document)
        except ValidationError as e:
            self._audit.log(AuditEventBuilder.import_rejected(
                self.user_id, f"{e.error_count()} validation error(s)"
            ))
            logger.debug("import_validation_failed", errors=e.errors(include_url=False))
            return False

        writes = [
            (EXPENSES, [expense.to_json_dict() for expense in parsed.expenses]),
            (CATEGORIES, [category.to_json_dict() for category in parsed.categories]),
            (SETTINGS, parsed.settings.to_json_dict()),
        ]
        if not self._write_all(writes):
            return False

        self._settings = parsed.settings
        self._expenses.reload()
        self._categories.reload()
        self._audit.log(AuditEventBuilder.data_imported(
            self.user_id, len(parsed.expenses), len(parsed.categories)
        ))
        return True

    def _write_all(self, writes: list[tuple[str, Any]]) -> bool:
        """Write every collection or none of them."""
        try:
            previous = {
                collection: self._storage.get(self.user_id, collection)
                for collection, _ in writes
            }
        except StorageError as e:
            self._audit.log_storage_failure("read", self.user_id, "import", e)
            self._audit.log(AuditEventBuilder.import_rejected(self.user_id, "storage unreadable"))
            return False

        written = []
        for collection, value in writes:
            try:
                self._storage.put(self.user_id, collection, value)
            except StorageError as e:
                self._audit.log_storage_failure("write", self.user_id, collection, e)
                self._rollback(written, previous)
                self._audit.log(AuditEventBuilder.import_rejected(self.user_id, "storage write failed"))
                return False
            written.append(collection)
        return True

    def _rollback(self, written: list[str], previous: dict[str, Any]) -> None:
        for collection in reversed(written):
            try:
                if previous[collection] is None:
                    self._storage.delete(self.user_id, collection)
                else:
                    self._storage.put(self.user_id, collection, previous[collection])
            except StorageError as e:
                self._audit.log_storage_failure("write", self.user_id, collection, e)
