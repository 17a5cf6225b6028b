"""Authentication/session API.

Routes:
    POST /auth/login   {"username", "password"} -> {"token", "expires_in", "user"}
    GET  /auth/whoami  Authorization: Bearer <token> -> user profile
"""

from typing import Dict

from sanato.auth.tokens import TokenAuthenticator, TokenIssuer
from sanato.core.constants import AUTH_URL
from sanato.core.errors import TokenError
from sanato.http.access_log import record_user
from sanato.http.wsgi import HTTPError, Request, Response, json_response
from sanato.modules.base import Module, ModuleDeps


class AuthAPI(Module):
    """Exchanges credentials for signed session tokens."""

    name = "auth"

    def __init__(self, deps: ModuleDeps):
        super().__init__(deps)
        self.issuer = TokenIssuer.from_config(self.config)
        self.authenticator = TokenAuthenticator(self.issuer, self.credentials)

    def start(self) -> None:
        self.router.post(f"{AUTH_URL}/login", self.login)
        self.router.get(f"{AUTH_URL}/whoami", self.whoami)

    def login(self, request: Request, params: Dict[str, str]) -> Response:
        body = request.json()
        if not isinstance(body, dict):
            raise HTTPError(400, "Expected a JSON object")

        username = body.get("username")
        password = body.get("password")
        if not isinstance(username, str) or not isinstance(password, str):
            raise HTTPError(400, "username and password are required")

        user = self.credentials.authenticate(username, password)
        if user is None:
            self.logger.warning("Login failed", username=username)
            raise HTTPError(401, "Invalid username or password")

        self.logger.info("Login succeeded", username=username)
        record_user(request.environ, user.username)
        return json_response(
            {
                "token": self.issuer.issue(user),
                "expires_in": self.issuer.ttl_seconds,
                "user": user.public_dict(),
            }
        )

    def whoami(self, request: Request, params: Dict[str, str]) -> Response:
        try:
            user = self.authenticator.authenticate(request.header("Authorization"))
        except TokenError as e:
            raise HTTPError(401, e.message, [("WWW-Authenticate", "Bearer")])
        record_user(request.environ, user.username)
        return json_response(user.public_dict())
