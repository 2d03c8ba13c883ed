"""Clients for the backend REST and auth collaborators."""

from portfolio_client.remote.http_client import BackendClient
from portfolio_client.remote.auth import AuthService, AuthSession, AuthUser, SessionState

__all__ = [
    "BackendClient",
    "AuthService",
    "AuthSession",
    "AuthUser",
    "SessionState",
]
