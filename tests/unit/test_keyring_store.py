"""
Unit tests for the keyring credential store.

Tests cover:
- Reads return the stored value, or None when missing or the backend fails
- Writes only accept session keys with non-empty values
- Deleting a missing item is not an error
"""

from unittest.mock import patch

import pytest
from keyring.errors import KeyringError, PasswordDeleteError

from portfolio_client.repositories.keyring_store import KeyringCredentialStore
from portfolio_client.repositories.protocols.credential_store import ACCESS_TOKEN_KEY

SERVICE = "portfolio-client-test"
KEYRING = "portfolio_client.repositories.keyring_store.keyring"


# =============================================================================
# READ TESTS
# =============================================================================


class TestGet:
    def test_returns_value(self):
        with patch(KEYRING) as mock_keyring:
            mock_keyring.get_password.return_value = "token-1"
            result = KeyringCredentialStore(SERVICE).get(ACCESS_TOKEN_KEY)

        assert result == "token-1"
        mock_keyring.get_password.assert_called_once_with(SERVICE, ACCESS_TOKEN_KEY)

    def test_missing_item_is_none(self):
        with patch(KEYRING) as mock_keyring:
            mock_keyring.get_password.return_value = None
            assert KeyringCredentialStore(SERVICE).get(ACCESS_TOKEN_KEY) is None

    def test_backend_failure_is_none(self):
        """
        GIVEN a keyring backend that raises
        WHEN a credential is read
        THEN the store reports no credential
        """
        with patch(KEYRING) as mock_keyring:
            mock_keyring.get_password.side_effect = KeyringError("locked")
            assert KeyringCredentialStore(SERVICE).get(ACCESS_TOKEN_KEY) is None


# =============================================================================
# WRITE TESTS
# =============================================================================


class TestSet:
    def test_stores_value(self):
        with patch(KEYRING) as mock_keyring:
            KeyringCredentialStore(SERVICE).set(ACCESS_TOKEN_KEY, "token-1")

        mock_keyring.set_password.assert_called_once_with(SERVICE, ACCESS_TOKEN_KEY, "token-1")

    def test_rejects_unknown_key(self):
        with patch(KEYRING) as mock_keyring:
            with pytest.raises(ValueError):
                KeyringCredentialStore(SERVICE).set("not.a.key", "x")

        mock_keyring.set_password.assert_not_called()

    def test_rejects_blank_value(self):
        with patch(KEYRING) as mock_keyring:
            with pytest.raises(ValueError):
                KeyringCredentialStore(SERVICE).set(ACCESS_TOKEN_KEY, "   ")

        mock_keyring.set_password.assert_not_called()


class TestDelete:
    def test_deletes_value(self):
        with patch(KEYRING) as mock_keyring:
            KeyringCredentialStore(SERVICE).delete(ACCESS_TOKEN_KEY)

        mock_keyring.delete_password.assert_called_once_with(SERVICE, ACCESS_TOKEN_KEY)

    def test_missing_item_is_not_an_error(self):
        with patch(KEYRING) as mock_keyring:
            mock_keyring.delete_password.side_effect = PasswordDeleteError("not found")
            KeyringCredentialStore(SERVICE).delete(ACCESS_TOKEN_KEY)
