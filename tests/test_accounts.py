"""Tests for the on-disk account registry."""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest
from pydantic import SecretStr

from conftest import DRASL_URL, MemoryKeyring
from yggauth.accounts import AccountRegistry
from yggauth.exceptions import ConfigError
from yggauth.models import AccountData, AccountType
from yggauth.provider import YggdrasilProvider
from yggauth.secret_store import SecretStore

DOMAIN = "drasl.example.com"


def _account(username: str = "alice", token: str = "T1") -> AccountData:
    return AccountData(
        access_token=SecretStr(token),
        client_token="C1",
        uuid="U1",
        refresh_token=SecretStr(token),
        username=username,
        nice_username=username.title(),
        account_type=AccountType.yggdrasil(YggdrasilProvider.parse(DRASL_URL)),
    )


@pytest.fixture
def registry(store: SecretStore, tmp_path: Path) -> AccountRegistry:
    return AccountRegistry(store, tmp_path / "accounts.json")


class TestSave:
    def test_file_holds_no_tokens(self, registry: AccountRegistry) -> None:
        registry.save(_account(), DOMAIN)

        text = registry.path.read_text()
        assert "T1" not in text
        data = json.loads(text)
        assert list(data) == ["alice#drasl_example_com"]
        assert data["alice#drasl_example_com"]["domain"] == DOMAIN

    def test_file_mode(self, registry: AccountRegistry) -> None:
        registry.save(_account(), DOMAIN)
        assert stat.S_IMODE(os.stat(registry.path).st_mode) == 0o600

    def test_save_replaces(self, registry: AccountRegistry) -> None:
        registry.save(_account(), DOMAIN)
        registry.save(_account().model_copy(update={"nice_username": "Renamed"}), DOMAIN)
        [record] = registry.list_accounts()
        assert record.nice_username == "Renamed"


class TestLoad:
    def test_with_token(
        self, registry: AccountRegistry, memory_keyring: MemoryKeyring
    ) -> None:
        registry.save(_account(), DOMAIN)
        memory_keyring.secrets[("yggauth-test", "alice#drasl_example_com")] = "T9"

        account = registry.load("alice", DOMAIN)

        assert account is not None
        assert account.access_token is not None
        assert account.access_token.get_secret_value() == "T9"
        assert account.refresh_token.get_secret_value() == "T9"
        assert account.needs_refresh is False
        assert account.account_type == _account().account_type

    def test_without_token_needs_refresh(self, registry: AccountRegistry) -> None:
        registry.save(_account(), DOMAIN)

        account = registry.load("alice", DOMAIN)

        assert account is not None
        assert account.access_token is None
        assert account.needs_refresh is True

    def test_unknown(self, registry: AccountRegistry) -> None:
        assert registry.load("nobody", DOMAIN) is None

    def test_corrupt_file(self, registry: AccountRegistry) -> None:
        registry.path.write_text("{broken")
        with pytest.raises(ConfigError, match="Corrupt account registry"):
            registry.load("alice", DOMAIN)


class TestRemoveAndList:
    def test_remove(self, registry: AccountRegistry) -> None:
        registry.save(_account(), DOMAIN)
        assert registry.remove("alice", DOMAIN) is True
        assert registry.remove("alice", DOMAIN) is False
        assert registry.list_accounts() == []

    def test_list_sorted(self, registry: AccountRegistry) -> None:
        registry.save(_account("carol"), DOMAIN)
        registry.save(_account("bob"), DOMAIN)
        assert [r.username for r in registry.list_accounts()] == ["bob", "carol"]

    def test_list_empty_without_file(self, registry: AccountRegistry) -> None:
        assert registry.list_accounts() == []


class TestClearSession:
    def test_keeps_metadata(
        self, registry: AccountRegistry, memory_keyring: MemoryKeyring
    ) -> None:
        registry.save(_account(), DOMAIN)
        memory_keyring.secrets[("yggauth-test", "alice#drasl_example_com")] = "T1"

        registry.clear_session("alice", DOMAIN)

        assert memory_keyring.secrets == {}
        account = registry.load("alice", DOMAIN)
        assert account is not None and account.needs_refresh is True

    def test_missing_token_is_ignored(self, registry: AccountRegistry) -> None:
        registry.clear_session("alice", DOMAIN)


def test_default_path_in_data_dir(store: SecretStore, isolated_config: Path) -> None:
    registry = AccountRegistry(store)
    assert registry.path == isolated_config / "data" / "yggauth" / "accounts.json"
