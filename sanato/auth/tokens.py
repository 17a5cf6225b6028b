"""Session tokens signed with the deployment's token secret.

Tokens are JWTs signed with ``Config.token_cipher_suite``. The HMAC key is
the digest of ``Config.token_secret`` under the algorithm's own hash
(SHA-256 for HS256 and so on), so the key is always as long as PyJWT
requires while the persisted secret stays short and alphanumeric.
Tokens stay valid across restarts for as long as the config file is kept.
"""

import hashlib
import time
from typing import Any, Dict, Optional

import jwt

from sanato.auth.credentials import CredentialStore, User
from sanato.core.config import Config
from sanato.core.constants import DEFAULT_TOKEN_TTL_SECONDS
from sanato.core.errors import TokenError

BEARER_PREFIX = "bearer "


def signing_key(secret: str, algorithm: str) -> bytes:
    """Derive the HMAC key for an ``HS<bits>`` algorithm from the token secret."""
    return hashlib.new(f"sha{algorithm[2:]}", secret.encode("utf-8")).digest()


class TokenIssuer:
    """Issues and verifies signed session tokens."""

    def __init__(self, secret: str, algorithm: str, ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS):
        if not secret:
            raise TokenError("Token secret must not be empty")
        self.algorithm = algorithm
        self._key = signing_key(secret, algorithm)
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_config(cls, config: Config, ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS) -> "TokenIssuer":
        return cls(config.token_secret, config.token_cipher_suite, ttl_seconds)

    def issue(self, user: User, now: Optional[float] = None) -> str:
        """Issue a token for a user.

        Args:
            user: Authenticated user
            now: Issue time (defaults to the current time)

        Returns:
            Encoded JWT
        """
        issued_at = int(now if now is not None else time.time())
        claims = {
            "sub": user.username,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        return jwt.encode(claims, self._key, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """Verify a token and return its claims.

        Raises:
            TokenError: If the token is expired, forged or malformed
        """
        try:
            claims = jwt.decode(
                token,
                self._key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")
        return claims


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer`` header value.

    Raises:
        TokenError: If the header is missing or not a bearer credential
    """
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        raise TokenError("Missing bearer token")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise TokenError("Missing bearer token")
    return token


class TokenAuthenticator:
    """Resolves a request's bearer token to a current user."""

    def __init__(self, issuer: TokenIssuer, credentials: CredentialStore):
        self.issuer = issuer
        self.credentials = credentials

    def authenticate(self, authorization: Optional[str]) -> User:
        """Resolve an Authorization header to a user.

        Raises:
            TokenError: If the token is invalid or its user no longer exists
        """
        claims = self.issuer.verify(bearer_token(authorization))
        user = self.credentials.get_user(claims["sub"])
        if user is None:
            raise TokenError(f"Unknown user: {claims['sub']}")
        return user
