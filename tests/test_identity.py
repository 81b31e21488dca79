"""Tests for registration, login and session restore."""

import pytest

from expense_tracker.identity import AuthService, Session
from expense_tracker.models import User
from expense_tracker.services.storage import CURRENT_USER, USERS


class TestRegister:
    """Tests for AuthService.register."""

    def test_register_signs_in(self, storage):
        auth = AuthService(storage)
        assert auth.register("Asha", "Asha@Example.com", "secret") is True

        assert auth.session is not None
        assert auth.session.user.email == "asha@example.com"
        assert storage.get(None, CURRENT_USER)["id"] == auth.session.user_id

    def test_register_stores_account(self, storage):
        AuthService(storage).register("Asha", "asha@example.com", "secret")
        users = storage.get(None, USERS)
        assert len(users) == 1
        assert users[0]["password"] == "secret"

    def test_duplicate_email_rejected(self, storage):
        auth = AuthService(storage)
        auth.register("Asha", "asha@example.com", "secret")
        assert auth.register("Other", "ASHA@example.com", "pw") is False
        assert len(storage.get(None, USERS)) == 1

    def test_empty_fields_rejected(self, storage):
        auth = AuthService(storage)
        assert auth.register("", "asha@example.com", "secret") is False
        assert auth.register("Asha", "asha@example.com", "") is False
        assert storage.get(None, USERS) is None

    def test_write_failure_returns_false(self, flaky_storage):
        flaky_storage.fail_writes.add(USERS)
        auth = AuthService(flaky_storage)
        assert auth.register("Asha", "asha@example.com", "secret") is False
        assert auth.session is None


class TestLogin:
    """Tests for login, logout and session restore."""

    @pytest.fixture
    def registered(self, storage):
        AuthService(storage).register("Asha", "asha@example.com", "secret")
        return storage

    def test_login_with_correct_password(self, registered):
        auth = AuthService(registered)
        assert auth.login(" asha@example.com ", "secret") is True
        assert auth.session.user.name == "Asha"

    def test_login_with_wrong_password(self, registered):
        auth = AuthService(registered)
        assert auth.login("asha@example.com", "nope") is False
        assert auth.session is None

    def test_login_unknown_email(self, registered):
        assert AuthService(registered).login("ravi@example.com", "secret") is False

    def test_logout_clears_pointer(self, registered):
        auth = AuthService(registered)
        auth.login("asha@example.com", "secret")
        auth.logout()
        assert auth.session is None
        assert registered.get(None, CURRENT_USER) is None

    def test_current_session_restored_from_storage(self, registered):
        """A new process picks up the signed-in user."""
        session = AuthService(registered).current_session()
        assert session is not None
        assert session.user.email == "asha@example.com"

    def test_no_session_without_pointer(self, storage):
        assert AuthService(storage).current_session() is None


class TestSession:
    """Tests for the Session value object."""

    def test_user_id(self):
        session = Session(user=User(id="u1", name="Asha", email="asha@example.com"))
        assert session.user_id == "u1"

    def test_frozen(self):
        session = Session(user=User(id="u1", name="Asha", email="asha@example.com"))
        with pytest.raises(Exception):
            session.user = User(id="u2", name="Ravi", email="ravi@example.com")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
