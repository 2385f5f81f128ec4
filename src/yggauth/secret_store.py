"""Keyring-backed storage for session tokens.

Each account's access token lives in the platform secret store (Secret
Service on Linux, Keychain on macOS, Credential Locker on Windows) under the
application's service name and a key derived from the username and the auth
server's domain::

    alice#drasl_example_com

Dots in the domain are replaced by underscores.  Errors from the
:mod:`keyring` backends are converted into :class:`~yggauth.exceptions.KeyringError`
so they travel through the same taxonomy as the HTTP failures.
"""

from __future__ import annotations

from typing import Optional

import keyring
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError as BackendError
from keyring.errors import PasswordDeleteError

from yggauth.exceptions import KeyringError, NoEntryError


def entry_key(username: str, provider_domain: str) -> str:
    """Build the keyring key for *username* on *provider_domain*."""
    return f"{username}#{provider_domain.replace('.', '_')}"


class SecretStore:
    """Read/write tokens for one application in the platform keyring.

    Args:
        service: Application identifier used as the keyring service name.
        backend: Keyring backend to use.  Defaults to the backend
            :func:`keyring.get_keyring` selects for the platform.

    Example::

        store = SecretStore("yggauth")
        key = entry_key("alice", "drasl.example.com")
        store.set(key, "tok123")
        assert store.get(key) == "tok123"
    """

    def __init__(self, service: str, backend: Optional[KeyringBackend] = None) -> None:
        self._service = service
        self._backend = backend

    @property
    def backend(self) -> KeyringBackend:
        if self._backend is None:
            self._backend = keyring.get_keyring()
        return self._backend

    def set(self, key: str, secret: str) -> None:
        """Store *secret* under *key*, replacing any previous value.

        Raises:
            KeyringError: If the backend refuses the write.
        """
        try:
            self.backend.set_password(self._service, key, secret)
        except BackendError as exc:
            raise KeyringError(str(exc) or type(exc).__name__) from exc

    def get(self, key: str) -> str:
        """Return the secret stored under *key*.

        Raises:
            NoEntryError: If nothing is stored under *key*.
            KeyringError: If the backend cannot be read.
        """
        try:
            secret = self.backend.get_password(self._service, key)
        except BackendError as exc:
            raise KeyringError(str(exc) or type(exc).__name__) from exc
        if secret is None:
            raise NoEntryError(key)
        return secret

    def delete(self, key: str) -> None:
        """Remove the secret stored under *key*.

        Raises:
            NoEntryError: If nothing is stored under *key*.
            KeyringError: If the backend refuses the deletion.
        """
        try:
            self.backend.delete_password(self._service, key)
        except PasswordDeleteError as exc:
            raise NoEntryError(key) from exc
        except BackendError as exc:
            raise KeyringError(str(exc) or type(exc).__name__) from exc

    def read_refresh_token(self, username: str, provider_domain: str) -> str:
        """Return the stored session token for *username* on *provider_domain*."""
        return self.get(entry_key(username, provider_domain))
