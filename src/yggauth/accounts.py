"""Account registry: non-secret account metadata persisted on disk.

The keyring only holds tokens.  Everything else the launcher needs to
rebuild an :class:`~yggauth.models.AccountData` between runs (client token,
uuid, display name, backend) is kept in ``<data_dir>/accounts.json``, one
record per keyring key.  Token fields are never written to this file; they
are read back from the keyring on :meth:`AccountRegistry.load`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, SecretStr, ValidationError

from yggauth.config import atomic_write, get_data_dir
from yggauth.exceptions import ConfigError, NoEntryError
from yggauth.models import AccountData, AccountType
from yggauth.secret_store import SecretStore, entry_key

_ACCOUNTS_FILENAME = "accounts.json"


class AccountRecord(BaseModel):
    """The persisted, token-free part of an :class:`AccountData`."""

    client_token: str
    uuid: str
    username: str
    nice_username: str
    account_type: AccountType
    domain: str

    @property
    def key(self) -> str:
        return entry_key(self.username, self.domain)


class AccountRegistry:
    """Persist account metadata and rehydrate accounts with their keyring tokens.

    Args:
        store: Keyring wrapper the tokens are read from.
        path: Registry file.  Defaults to ``<data_dir>/accounts.json``.

    Example::

        registry = AccountRegistry(store)
        registry.save(account, "drasl.example.com")
        account = registry.load("alice", "drasl.example.com")
    """

    def __init__(self, store: SecretStore, path: Optional[Path] = None) -> None:
        self._store = store
        self._path = path or get_data_dir() / _ACCOUNTS_FILENAME

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, AccountRecord]:
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return {key: AccountRecord.model_validate(value) for key, value in data.items()}
        except (json.JSONDecodeError, ValidationError, AttributeError) as exc:
            raise ConfigError(f"Corrupt account registry {self._path}: {exc}") from exc

    def _write(self, records: dict[str, AccountRecord]) -> None:
        data = {key: record.model_dump(mode="json") for key, record in records.items()}
        atomic_write(self._path, json.dumps(data, indent=2) + "\n", mode=0o600)

    def save(self, account: AccountData, domain: str) -> None:
        """Store the metadata of *account*, served from *domain*."""
        record = AccountRecord(
            client_token=account.client_token,
            uuid=account.uuid,
            username=account.username,
            nice_username=account.nice_username,
            account_type=account.account_type,
            domain=domain,
        )
        records = self._read()
        records[record.key] = record
        self._write(records)

    def load(self, username: str, domain: str) -> Optional[AccountData]:
        """Rebuild the account of *username* on *domain*.

        When the keyring has no token for the account, it is returned
        without an access token and with ``needs_refresh`` set, so the
        caller knows to log in again.

        Returns:
            The account, or ``None`` if it was never saved.
        """
        record = self._read().get(entry_key(username, domain))
        if record is None:
            return None
        try:
            token: Optional[str] = self._store.read_refresh_token(username, domain)
        except NoEntryError:
            token = None
        return AccountData(
            access_token=SecretStr(token) if token is not None else None,
            client_token=record.client_token,
            uuid=record.uuid,
            refresh_token=SecretStr(token or ""),
            needs_refresh=token is None,
            username=record.username,
            nice_username=record.nice_username,
            account_type=record.account_type,
        )

    def remove(self, username: str, domain: str) -> bool:
        """Drop the record of *username* on *domain*.  Returns whether one existed."""
        records = self._read()
        if records.pop(entry_key(username, domain), None) is None:
            return False
        self._write(records)
        return True

    def list_accounts(self) -> list[AccountRecord]:
        """All saved records, ordered by username."""
        return sorted(self._read().values(), key=lambda r: (r.username, r.domain))

    def clear_session(self, username: str, domain: str) -> None:
        """Delete the keyring token of a saved account, keeping its metadata."""
        try:
            self._store.delete(entry_key(username, domain))
        except NoEntryError:
            pass
