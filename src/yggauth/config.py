"""Configuration management with XDG paths, atomic writes, and env overrides.

This module handles all persistent configuration for yggauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.yggauth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Settings** -- A single :class:`Settings` JSON file storing the keyring
  service name, HTTP timeout, TLS verification, and the Ely.by endpoint.
* **Environment overrides** -- ``YGGAUTH_*`` variables win over the file;
  see :func:`load_settings`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so that a crash never leaves a half-written file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from yggauth import __version__
from yggauth.exceptions import ConfigError

_APP_NAME = "yggauth"
_CONFIG_FILENAME = "config.json"

ELYBY_AUTH_URL = "https://authserver.ely.by/auth/authenticate"


class Settings(BaseModel):
    """User-tunable settings.

    Example::

        Settings(keyring_service="my-launcher", timeout=10)
    """

    keyring_service: str = Field(
        default=_APP_NAME,
        description="Application identifier used as the keyring service name",
    )
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    user_agent: str = Field(default=f"{_APP_NAME}/{__version__}")
    elyby_url: str = Field(
        default=ELYBY_AUTH_URL,
        description="Authenticate endpoint of the Ely.by auth server",
    )


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/yggauth/`` (default ``~/.config/yggauth/``).
    On macOS/Windows: ``~/.yggauth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (account registry, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/yggauth/`` (default ``~/.local/share/yggauth/``).
    On macOS/Windows: ``~/.yggauth/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  When *mode* is
    given it is applied to the temp file before any content is written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Settings ---


def _settings_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


_ENV_OVERRIDES = {
    "YGGAUTH_KEYRING_SERVICE": "keyring_service",
    "YGGAUTH_TIMEOUT": "timeout",
    "YGGAUTH_VERIFY_SSL": "verify_ssl",
    "YGGAUTH_ELYBY_URL": "elyby_url",
}


def load_settings() -> Settings:
    """Load settings from ``config.json`` and apply ``YGGAUTH_*`` overrides.

    Precedence (highest first): environment variables, the config file,
    built-in defaults.

    Returns:
        The effective :class:`Settings`.

    Raises:
        ConfigError: If the file contains invalid JSON, or if the merged
            values fail validation.
    """
    data: dict = {}
    path = _settings_path()
    if path.is_file():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")

    for env_var, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[field_name] = value

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def save_settings(settings: Settings) -> None:
    """Persist *settings* to ``config.json`` atomically."""
    text = json.dumps(settings.model_dump(mode="json"), indent=2) + "\n"
    atomic_write(_settings_path(), text)
