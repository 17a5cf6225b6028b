#!/usr/bin/env python3
"""Credential store for Sanato.

This module provides the persisted user repository:
- User: account record holding a one-way password hash
- CredentialStore: existence check, first-account creation, lookup and
  password authentication over a JSON file

The store synchronizes its own reads and writes, so administrative
mutations are safe while requests are being served.

Example:
    >>> store = CredentialStore("./auth.json")
    >>> if not store.exists_auth():
    ...     store.create_user("admin", "secret1", "Admin", "a@b.com")
    >>> store.authenticate("admin", "secret1").display_name
    'Admin'
"""

import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from sanato.auth.hashing import PasswordHasher, default_hasher
from sanato.core.constants import ErrorCode, UserKey
from sanato.core.errors import CredentialError, StoreIOError
from sanato.core.file_ops import read_text, write_atomic
from sanato.core.validators import validate_email, validate_password, validate_username


@dataclass(frozen=True)
class User:
    """User account. ``password`` is always a hash."""

    username: str
    password: str
    display_name: str = ""
    email: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Serialize using the on-disk key names."""
        return {
            UserKey.USERNAME: self.username,
            UserKey.PASSWORD: self.password,
            UserKey.DISPLAY_NAME: self.display_name,
            UserKey.EMAIL: self.email,
        }

    def public_dict(self) -> Dict[str, str]:
        """Profile fields safe to hand to clients."""
        data = self.to_dict()
        del data[UserKey.PASSWORD]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        try:
            return cls(
                username=str(data[UserKey.USERNAME]),
                password=str(data[UserKey.PASSWORD]),
                display_name=str(data.get(UserKey.DISPLAY_NAME, "")),
                email=str(data.get(UserKey.EMAIL, "")),
            )
        except (KeyError, TypeError) as e:
            raise CredentialError(f"Malformed user record: {e}")

    def __repr__(self) -> str:
        return f"User(username={self.username!r}, display_name={self.display_name!r})"


class CredentialStore:
    """Thread-safe JSON-backed user repository."""

    def __init__(self, path: Union[str, Path], hasher: Optional[PasswordHasher] = None):
        """Initialize credential store.

        Args:
            path: Location of the credential file
            hasher: Password hasher (defaults to the shared Argon2id hasher)
        """
        self.path = Path(path)
        self._hasher = hasher or default_hasher()
        self._lock = threading.RLock()

    def exists_auth(self) -> bool:
        """Check whether the credential file is present.

        The answer does not depend on whether the file holds any users.
        """
        return self.path.exists()

    def _load(self) -> Dict[str, User]:
        try:
            text = read_text(self.path)
        except FileNotFoundError:
            return {}

        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as e:
            raise StoreIOError(f"Corrupt credential file {self.path}: {e}", ErrorCode.INVALID_INPUT)

        if not isinstance(data, dict):
            raise StoreIOError(f"Invalid credential file format: {self.path}", ErrorCode.INVALID_INPUT)

        users = {}
        for record in data.get(UserKey.USERS, []):
            user = User.from_dict(record)
            users[user.username] = user
        return users

    def _save(self, users: Dict[str, User]) -> None:
        payload = {UserKey.USERS: [user.to_dict() for user in users.values()]}
        write_atomic(self.path, json.dumps(payload, indent=2) + "\n")

    def create_user(
        self, username: str, password: str, display_name: str = "", email: str = ""
    ) -> User:
        """Create and persist an account.

        The password is hashed before anything is written; a hashing
        failure leaves the store untouched.

        Args:
            username: Unique account name
            password: Plaintext password
            display_name: Human-readable name
            email: Contact address

        Returns:
            The persisted User

        Raises:
            CredentialError: If the username is invalid or already taken, or the
                password is empty
            HashError: If password hashing fails
            StoreIOError: If the store cannot be read or written
        """
        validate_username(username)
        validate_password(password)
        validate_email(email)

        with self._lock:
            users = self._load()
            if username in users:
                raise CredentialError(f"User already exists: {username}", ErrorCode.CONFLICT)

            hashed = self._hasher.hash(password)
            user = User(
                username=username,
                password=hashed,
                display_name=display_name,
                email=email,
            )
            users[username] = user
            self._save(users)
            return user

    def get_user(self, username: str) -> Optional[User]:
        """Look up an account by name."""
        with self._lock:
            return self._load().get(username)

    def list_users(self) -> List[User]:
        """Return all accounts in creation order."""
        with self._lock:
            return list(self._load().values())

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Verify a username/password pair.

        Returns:
            The matching User, or None if unknown or the password is wrong
        """
        user = self.get_user(username)
        if user is None:
            return None
        if not self._hasher.verify(user.password, password):
            return None
        return user
