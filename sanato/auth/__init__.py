"""Sanato authentication: credential store, password hashing, session tokens."""

from .credentials import CredentialStore, User
from .hashing import PasswordHasher, verify_password
from .tokens import TokenAuthenticator, TokenIssuer, bearer_token

__all__ = [
    "CredentialStore",
    "User",
    "PasswordHasher",
    "verify_password",
    "TokenAuthenticator",
    "TokenIssuer",
    "bearer_token",
]
