"""Shared test fixtures for yggauth.

Provides an in-memory keyring backend, isolated XDG directories, a mock
Yggdrasil server built on :class:`httpx.MockTransport`, and output/logging
state resets between tests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError

from yggauth.auth import YggdrasilAuthenticator
from yggauth.client import YggdrasilClient
from yggauth.config import Settings
from yggauth.output import reset_output
from yggauth.secret_store import SecretStore

DRASL_URL = "https://drasl.example.com/auth/"


class MemoryKeyring(KeyringBackend):
    """Keyring backend keeping secrets in a dict.

    Set :attr:`fail_with` to make every call raise that keyring error.
    """

    priority = 1  # type: ignore[assignment]

    def __init__(self) -> None:
        super().__init__()
        self.secrets: dict[tuple[str, str], str] = {}
        self.fail_with: Optional[KeyringError] = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def get_password(self, service: str, username: str) -> Optional[str]:
        self._check()
        return self.secrets.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self._check()
        self.secrets[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        self._check()
        try:
            del self.secrets[(service, username)]
        except KeyError:
            raise PasswordDeleteError("Password not found") from None


class MockServer:
    """Scripted Yggdrasil server: one queued response per expected request.

    Every request received is recorded in :attr:`requests` with its JSON
    body decoded.
    """

    def __init__(self) -> None:
        self.responses: list[httpx.Response] = []
        self.requests: list[httpx.Request] = []

    def queue(
        self,
        status_code: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
    ) -> None:
        if text is not None:
            self.responses.append(httpx.Response(status_code, text=text))
        elif json_body is not None:
            self.responses.append(httpx.Response(status_code, json=json_body))
        else:
            self.responses.append(httpx.Response(status_code))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        return self.responses.pop(0)

    def body(self, index: int = -1) -> dict[str, Any]:
        return json.loads(self.requests[index].content)

    def url(self, index: int = -1) -> str:
        return str(self.requests[index].url)


def login_body(
    access_token: str = "T1",
    client_token: str = "C1",
    profile: Optional[dict[str, str]] = None,
    with_profile: bool = True,
) -> dict[str, Any]:
    """A successful ``authenticate``/``refresh`` response body."""
    body: dict[str, Any] = {"accessToken": access_token, "clientToken": client_token}
    if with_profile:
        body["selectedProfile"] = profile or {"id": "U1", "name": "Alice"}
    return body


# ---------------------------------------------------------------------------
# Global state resets
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the ``yggauth`` logger after every test.

    CLI runs attach a handler bound to the runner's captured stderr; leaving
    it in place would write to a closed stream in later tests.
    """
    yield
    reset_output()
    logger = logging.getLogger("yggauth")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Keyring and transport
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_keyring() -> MemoryKeyring:
    return MemoryKeyring()


@pytest.fixture
def store(memory_keyring: MemoryKeyring) -> SecretStore:
    return SecretStore("yggauth-test", backend=memory_keyring)


@pytest.fixture
def server() -> MockServer:
    return MockServer()


@pytest.fixture
def make_client(server: MockServer) -> Callable[[], YggdrasilClient]:
    def _make() -> YggdrasilClient:
        return YggdrasilClient(
            http_client=httpx.Client(transport=httpx.MockTransport(server.handler))
        )

    return _make


@pytest.fixture
def auth(
    make_client: Callable[[], YggdrasilClient], store: SecretStore
) -> YggdrasilAuthenticator:
    return YggdrasilAuthenticator(make_client(), store, Settings())


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and data to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    forces the XDG code path, and clears all YGGAUTH_* environment variables.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("yggauth.config._is_xdg_platform", lambda: True)

    for var in [
        "YGGAUTH_KEYRING_SERVICE",
        "YGGAUTH_TIMEOUT",
        "YGGAUTH_VERIFY_SSL",
        "YGGAUTH_ELYBY_URL",
    ]:
        monkeypatch.delenv(var, raising=False)

    return tmp_path


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
