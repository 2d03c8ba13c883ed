"""Keyring-backed credential storage for session tokens.

Thin wrapper around the ``keyring`` library storing the access token,
refresh token and user id in the OS keychain (or any other backend supported
by keyring). "Item not found" is an expected empty state and reads as None.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from portfolio_client.repositories.protocols.credential_store import CREDENTIAL_KEYS

logger = logging.getLogger(__name__)


class KeyringCredentialStore:
    """CredentialStore implementation on top of ``keyring``."""

    def __init__(self, service_name: str):
        self._service_name = service_name

    def get(self, key: str) -> Optional[str]:
        """Retrieve a credential from the keychain."""
        try:
            return keyring.get_password(self._service_name, key)
        except KeyringError:
            logger.debug("keyring lookup failed for %s", key, exc_info=True)
            return None

    def set(self, key: str, value: str) -> None:
        """Store a credential in the keychain.

        Only the session keys are accepted.

        Raises:
            ValueError: If ``key`` is not a session key or ``value`` is empty.
        """
        if key not in CREDENTIAL_KEYS:
            raise ValueError(f"Not a credential key: {key}")
        if not value or not value.strip():
            raise ValueError(f"Empty value for {key}")

        keyring.set_password(self._service_name, key, value)
        logger.info("Stored %s in keychain", key)

    def delete(self, key: str) -> None:
        """Remove a credential from the keychain."""
        try:
            keyring.delete_password(self._service_name, key)
            logger.info("Deleted %s from keychain", key)
        except PasswordDeleteError:
            logger.debug("No %s stored in keychain", key)
