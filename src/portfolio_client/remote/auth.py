"""Password-grant authentication against the backend auth collaborator."""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from portfolio_client.core.exceptions import (
    AuthenticationError,
    ServerError,
    UnauthorizedError,
)
from portfolio_client.remote.http_client import BackendClient
from portfolio_client.repositories.protocols.credential_store import (
    CredentialStore,
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_ID_KEY,
)

logger = logging.getLogger(__name__)


class AuthUser(BaseModel):
    """User as returned by the auth endpoints."""

    model_config = {"extra": "ignore"}

    id: str
    email: Optional[str] = None
    created_at: Optional[str] = None


class AuthSession(BaseModel):
    """Token pair returned by a successful sign-in."""

    model_config = {"extra": "ignore"}

    access_token: str
    refresh_token: str
    expires_in: int
    user: AuthUser


class SignUpResponse(BaseModel):
    """Sign-up answers with the user and, without email confirmation, a session."""

    model_config = {"extra": "ignore"}

    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None


@dataclass
class SessionState:
    """The signed-in user, if any."""

    user_id: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


def _error_message(body: str, default: str) -> str:
    """Pull a human-readable message out of an auth error body."""
    try:
        data = json.loads(body)
    except ValueError:
        return default
    if not isinstance(data, dict):
        return default
    for key in ("error_description", "msg", "message", "hint", "error"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return default


class AuthService:
    """
    Sign-in, sign-up and session restore.

    Tokens live in the credential store. There is no automatic token
    refresh: an expired token surfaces as UnauthorizedError and requires
    signing in again.
    """

    def __init__(self, client: BackendClient, credentials: CredentialStore):
        self._client = client
        self._credentials = credentials
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    def sign_in(self, email: str, password: str) -> SessionState:
        """Exchange email and password for a session."""
        try:
            response = self._client.send(
                "POST",
                "auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                authorized=False,
            )
        except ServerError as exc:
            raise AuthenticationError(
                _error_message(exc.body, "Invalid email or password")
            ) from exc
        except UnauthorizedError as exc:
            raise AuthenticationError("Invalid email or password") from exc

        session = self._client.decode(response, AuthSession)
        self._store_session(session)
        logger.info("Signed in user %s", session.user.id)
        return self._state

    def sign_up(self, email: str, password: str) -> SessionState:
        """Register a new user; signs in when the backend returns a session."""
        try:
            response = self._client.send(
                "POST",
                "auth/v1/signup",
                json={"email": email, "password": password},
                authorized=False,
            )
        except ServerError as exc:
            raise AuthenticationError(_error_message(exc.body, "Sign up failed")) from exc

        result = self._client.decode(response, SignUpResponse)
        if result.session is not None:
            self._store_session(result.session)
        elif result.user is not None:
            logger.info("Signed up user %s; confirmation pending", result.user.id)
        return self._state

    def verify_session(self) -> bool:
        """Return True when the stored access token is still accepted."""
        if not self._credentials.get(ACCESS_TOKEN_KEY):
            return False
        try:
            response = self._client.send("GET", "auth/v1/user")
        except (UnauthorizedError, ServerError):
            return False
        user = self._client.decode(response, AuthUser)
        self._state = SessionState(user_id=user.id, email=user.email)
        return True

    def restore_session(self) -> SessionState:
        """
        Restore the previous session from the credential store.

        An invalid token clears the store. Network failures propagate so
        the caller can offer a retry instead of signing the user out.
        """
        if not self.verify_session():
            self._clear_credentials()
            self._state = SessionState()
        return self._state

    def sign_out(self) -> None:
        """Forget the session locally."""
        self._clear_credentials()
        self._state = SessionState()
        logger.info("Signed out")

    def _store_session(self, session: AuthSession) -> None:
        self._credentials.set(ACCESS_TOKEN_KEY, session.access_token)
        self._credentials.set(REFRESH_TOKEN_KEY, session.refresh_token)
        self._credentials.set(USER_ID_KEY, session.user.id)
        self._state = SessionState(user_id=session.user.id, email=session.user.email)

    def _clear_credentials(self) -> None:
        for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_ID_KEY):
            self._credentials.delete(key)
