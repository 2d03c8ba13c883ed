"""Credential store protocol for session tokens."""

from typing import Protocol, Optional

ACCESS_TOKEN_KEY = "session.accessToken"
REFRESH_TOKEN_KEY = "session.refreshToken"
USER_ID_KEY = "session.userId"

CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {
        ACCESS_TOKEN_KEY,
        REFRESH_TOKEN_KEY,
        USER_ID_KEY,
    }
)


class CredentialStore(Protocol):
    """Interface for secure storage of session credentials."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the item does not exist."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    def delete(self, key: str) -> None:
        """Remove a value. Removing a missing item is not an error."""
        ...
