"""Tests for the credential store."""
import json
import threading
from unittest.mock import MagicMock

import pytest

from sanato.auth.credentials import CredentialStore, User
from sanato.core.constants import ErrorCode
from sanato.core.errors import CredentialError, HashError, StoreIOError


@pytest.fixture
def store(tmp_path, fast_hasher):
    return CredentialStore(tmp_path / "auth.json", hasher=fast_hasher)


class TestUser:
    """Test the User record."""

    def test_repr_hides_password(self):
        user = User("admin", "$argon2id$hash", "Admin", "a@b.com")
        assert "argon2" not in repr(user)
        assert "admin" in repr(user)

    def test_public_dict(self):
        user = User("admin", "$argon2id$hash", "Admin", "a@b.com")
        assert user.public_dict() == {
            "username": "admin",
            "displayName": "Admin",
            "email": "a@b.com",
        }

    def test_from_dict_defaults(self):
        user = User.from_dict({"username": "bob", "password": "h"})
        assert user.display_name == ""
        assert user.email == ""

    def test_from_dict_missing_field(self):
        with pytest.raises(CredentialError):
            User.from_dict({"username": "bob"})


class TestExistsAuth:
    """Test credential file presence."""

    def test_missing(self, store):
        assert not store.exists_auth()

    def test_present_after_create(self, store):
        store.create_user("admin", "secret1")
        assert store.exists_auth()

    def test_present_without_users(self, store):
        store.path.write_text('{"users": []}')
        assert store.exists_auth()
        assert store.list_users() == []


class TestCreateUser:
    """Test account creation."""

    def test_persists_hash_not_plaintext(self, store):
        user = store.create_user("admin", "secret1", "Admin", "a@b.com")

        assert user.password != "secret1"
        raw = store.path.read_text()
        assert "secret1" not in raw

        data = json.loads(raw)
        assert data["users"][0]["username"] == "admin"
        assert data["users"][0]["displayName"] == "Admin"
        assert data["users"][0]["email"] == "a@b.com"
        assert data["users"][0]["password"] == user.password

    def test_hash_verifies(self, store, fast_hasher):
        user = store.create_user("admin", "secret1")
        assert fast_hasher.verify(user.password, "secret1")
        assert not fast_hasher.verify(user.password, "wrong")

    def test_duplicate_username(self, store):
        store.create_user("admin", "secret1")
        with pytest.raises(CredentialError) as exc_info:
            store.create_user("admin", "other")
        assert exc_info.value.error_code == ErrorCode.CONFLICT
        assert len(store.list_users()) == 1

    def test_invalid_username_writes_nothing(self, store):
        with pytest.raises(CredentialError):
            store.create_user("bad name", "secret1")
        assert not store.exists_auth()

    def test_empty_password_writes_nothing(self, store):
        with pytest.raises(CredentialError):
            store.create_user("admin", "")
        assert not store.exists_auth()

    def test_invalid_email_writes_nothing(self, store):
        with pytest.raises(CredentialError):
            store.create_user("admin", "secret1", email="nope")
        assert not store.exists_auth()

    def test_hash_failure_persists_nothing(self, tmp_path):
        hasher = MagicMock()
        hasher.hash.side_effect = HashError("hashing failed")
        store = CredentialStore(tmp_path / "auth.json", hasher=hasher)

        with pytest.raises(HashError):
            store.create_user("admin", "secret1")
        assert not store.exists_auth()

    def test_hash_failure_keeps_existing_users(self, store):
        store.create_user("admin", "secret1")
        before = store.path.read_text()

        store._hasher = MagicMock()
        store._hasher.hash.side_effect = HashError("hashing failed")
        with pytest.raises(HashError):
            store.create_user("bob", "secret2")
        assert store.path.read_text() == before

    def test_concurrent_creates(self, store):
        errors = []

        def create(i):
            try:
                store.create_user(f"user{i}", "pw")
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=create, args=(i,)) for i in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert sorted(u.username for u in store.list_users()) == [f"user{i}" for i in range(5)]


class TestLookup:
    """Test lookup and authentication."""

    def test_get_user(self, credentials):
        user = credentials.get_user("admin")
        assert user.display_name == "Admin"
        assert credentials.get_user("nobody") is None

    def test_list_users_in_creation_order(self, credentials):
        credentials.create_user("zed", "pw")
        credentials.create_user("amy", "pw")
        assert [u.username for u in credentials.list_users()] == ["admin", "zed", "amy"]

    def test_authenticate(self, credentials):
        assert credentials.authenticate("admin", "secret1").username == "admin"
        assert credentials.authenticate("admin", "wrong") is None
        assert credentials.authenticate("nobody", "secret1") is None

    def test_reload_from_disk(self, credentials, fast_hasher):
        reopened = CredentialStore(credentials.path, hasher=fast_hasher)
        assert reopened.authenticate("admin", "secret1") is not None

    def test_corrupt_file(self, store):
        store.path.write_text("{not json")
        with pytest.raises(StoreIOError) as exc_info:
            store.get_user("admin")
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

    def test_wrong_shape(self, store):
        store.path.write_text("[1, 2]")
        with pytest.raises(StoreIOError):
            store.list_users()
