"""
Identity and Session

Registration, login and logout against the global ``users`` collection,
and the ``Session`` object every per-user store is constructed with.

IMPORTANT: This is a local convenience check, not a security boundary.
Passwords are stored and compared in plaintext, exactly as the backup
format has always carried them.

Failures never raise: ``register`` and ``login`` answer with a boolean.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.models import AuditEventBuilder, StoredUser, User
from expense_tracker.services.storage import (
    CURRENT_USER,
    USERS,
    KeyValueStorage,
    StorageError,
)


class Session(BaseModel):
    """The signed-in user. Stores take one of these instead of a global."""

    model_config = ConfigDict(frozen=True)

    user: User

    @property
    def user_id(self) -> str:
        return self.user.id


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """
    Local account registry.

    ``users`` holds every registered account; ``user`` points at the one
    currently signed in so a restarted process can resume the session.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def _load_users(self) -> list[StoredUser]:
        try:
            raw = self._storage.get(None, USERS)
        except StorageError as e:
            self._audit.log_storage_failure("read", None, USERS, e)
            return []

        if not isinstance(raw, list):
            return []

        users = []
        for entry in raw:
            try:
                users.append(StoredUser.model_validate(entry))
            except ValidationError as e:
                self._audit.log_error("invalid_user_record", str(e))
        return users

    def _start_session(self, user: User) -> bool:
        try:
            self._storage.put(None, CURRENT_USER, user.to_json_dict())
        except StorageError as e:
            self._audit.log_storage_failure("write", user.id, CURRENT_USER, e)
            return False
        self._session = Session(user=user)
        return True

    def register(self, name: str, email: str, password: str) -> bool:
        """
        Create an account and sign it in.

        Returns False for empty fields, an email already registered,
        or a storage failure.
        """
        email = _normalize_email(email)
        users = self._load_users()

        if any(_normalize_email(u.email) == email for u in users):
            self._audit.log(AuditEventBuilder.registration_failed(email, "email already registered"))
            return False

        try:
            new_user = StoredUser(name=name, email=email, password=password)
        except ValidationError:
            self._audit.log(AuditEventBuilder.registration_failed(email, "invalid fields"))
            return False

        users.append(new_user)
        try:
            self._storage.put(
                None,
                USERS,
                [u.model_dump(mode="json", by_alias=True) for u in users],
            )
        except StorageError as e:
            self._audit.log_storage_failure("write", new_user.id, USERS, e)
            return False

        self._audit.log(AuditEventBuilder.user_registered(new_user.id, email))
        return self._start_session(new_user.public())

    def login(self, email: str, password: str) -> bool:
        """Sign in when an account matches both email and password."""
        email = _normalize_email(email)
        for user in self._load_users():
            if _normalize_email(user.email) == email and user.password == password:
                if not self._start_session(user.public()):
                    return False
                self._audit.log(AuditEventBuilder.user_logged_in(user.id))
                return True

        self._audit.log(AuditEventBuilder.login_failed(email))
        return False

    def logout(self) -> None:
        """Forget the current session."""
        if self._session is not None:
            self._audit.log(AuditEventBuilder.user_logged_out(self._session.user_id))
        self._session = None
        try:
            self._storage.delete(None, CURRENT_USER)
        except StorageError as e:
            self._audit.log_storage_failure("write", None, CURRENT_USER, e)

    def current_session(self) -> Optional[Session]:
        """The active session, resumed from storage if this process has none yet."""
        if self._session is not None:
            return self._session

        try:
            raw = self._storage.get(None, CURRENT_USER)
        except StorageError as e:
            self._audit.log_storage_failure("read", None, CURRENT_USER, e)
            return None

        if raw is None:
            return None
        try:
            self._session = Session(user=User.model_validate(raw))
        except ValidationError as e:
            self._audit.log_error("invalid_session_record", str(e))
            return None
        return self._session
