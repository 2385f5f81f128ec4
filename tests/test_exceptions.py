"""Tests for the exception hierarchy and exit-code mapping."""

from __future__ import annotations

import pytest

from yggauth.exceptions import (
    AUTH_ERR_PREFIX,
    AccountError,
    AccountResponseError,
    ConfigError,
    InvalidProviderUrlError,
    JsonError,
    KeyringError,
    MissingProfileError,
    NoEntryError,
    RequestError,
    UnsupportedAccountTypeError,
    YggauthError,
    keyring_hint,
)
from yggauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_KEYRING_ERROR,
)


class TestBanner:
    @pytest.mark.parametrize(
        "exc",
        [
            RequestError.from_status(403, "https://drasl.example.com/auth/authenticate"),
            JsonError("bad", "{}"),
            AccountResponseError("ForbiddenOperationException", "Invalid credentials."),
            MissingProfileError(),
            InvalidProviderUrlError("no host"),
            UnsupportedAccountTypeError("Microsoft"),
            KeyringError("locked"),
            NoEntryError("alice#example_com"),
        ],
    )
    def test_every_account_error_starts_with_banner(self, exc: AccountError) -> None:
        assert str(exc).startswith(AUTH_ERR_PREFIX)
        assert isinstance(exc, YggauthError)

    def test_detail_excludes_banner(self) -> None:
        exc = AccountResponseError("E", "M")
        assert not exc.detail.startswith(AUTH_ERR_PREFIX)
        assert "E: M" in exc.detail


class TestExitCodes:
    def test_config_error(self) -> None:
        assert ConfigError("x").exit_code == EXIT_GENERIC_FAILURE

    def test_request_error_without_status_is_connection_error(self) -> None:
        assert RequestError("refused").exit_code == EXIT_CONNECTION_ERROR

    def test_request_error_with_status_is_auth_failure(self) -> None:
        exc = RequestError.from_status(500, "https://x.example.com/refresh")
        assert exc.exit_code == EXIT_AUTH_FAILURE
        assert exc.status_code == 500
        assert exc.url == "https://x.example.com/refresh"
        assert "500" in str(exc)

    def test_response_error_fields(self) -> None:
        exc = AccountResponseError("ForbiddenOperationException", "Invalid token.")
        assert exc.exit_code == EXIT_AUTH_FAILURE
        assert exc.error == "ForbiddenOperationException"
        assert exc.error_message == "Invalid token."

    def test_invalid_url(self) -> None:
        assert InvalidProviderUrlError("x").exit_code == EXIT_INVALID_USAGE

    def test_keyring(self) -> None:
        assert KeyringError("x").exit_code == EXIT_KEYRING_ERROR
        assert isinstance(NoEntryError(), KeyringError)

    def test_override(self) -> None:
        assert ConfigError("x", exit_code=42).exit_code == 42


class TestKeyringHint:
    def test_not_activatable_hint_on_linux(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("yggauth.exceptions.sys.platform", "linux")
        hint = keyring_hint("org.freedesktop.DBus.Error: The name is not activatable")
        assert hint is not None and "gnome-keyring" in hint
        assert "gnome-keyring" in str(KeyringError("The name is not activatable"))

    def test_locked_keyring_hint_on_linux(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("yggauth.exceptions.sys.platform", "linux")
        hint = keyring_hint("no result found")
        assert hint is not None and "seahorse" in hint

    def test_no_hint_elsewhere(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("yggauth.exceptions.sys.platform", "darwin")
        assert keyring_hint("The name is not activatable") is None

    def test_no_hint_for_unknown_reason(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("yggauth.exceptions.sys.platform", "linux")
        assert keyring_hint("something else") is None
