"""Exception hierarchy for yggauth.

All exceptions inherit from :class:`YggauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`yggauth.exit_codes`.
The top-level error handler in :func:`yggauth.app.main` catches
``YggauthError`` and exits with the appropriate code.

Everything raised while talking to a Yggdrasil-family auth server derives
from :class:`AccountError`, whose message always starts with
:data:`AUTH_ERR_PREFIX` so display code can print it as opaque text::

    YggauthError (exit 1)
    +-- ConfigError                 (exit 1)
    +-- AccountError                (exit 3)
        +-- RequestError            (exit 6 without a status, 3 with one)
        +-- JsonError               (exit 3)
        +-- AccountResponseError    (exit 3)
        +-- MissingProfileError     (exit 3)
        +-- InvalidProviderUrlError (exit 2)
        +-- UnsupportedAccountTypeError (exit 2)
        +-- KeyringError            (exit 8)
            +-- NoEntryError        (exit 8)
"""

from __future__ import annotations

import sys
from typing import Optional

from yggauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_KEYRING_ERROR,
)

AUTH_ERR_PREFIX = "while logging into yggdrasil account:\n"


class YggauthError(Exception):
    """Base exception for all yggauth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(YggauthError):
    """Raised for configuration problems (invalid JSON, bad environment overrides)."""

    exit_code = EXIT_GENERIC_FAILURE


class AccountError(YggauthError):
    """Base class for failures while logging into a Yggdrasil-family account.

    ``str(exc)`` is the banner followed by the detail message; the bare
    detail is kept in :attr:`detail`.
    """

    exit_code = EXIT_AUTH_FAILURE

    def __init__(self, detail: str, exit_code: int | None = None):
        self.detail = detail
        super().__init__(f"{AUTH_ERR_PREFIX}{detail}", exit_code)


class RequestError(AccountError):
    """The HTTP exchange failed: network error or a non-success status.

    Attributes:
        status_code: HTTP status of the response, or ``None`` when no
            response was received.
        url: The effective URL of the request.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ):
        self.status_code = status_code
        self.url = url
        super().__init__(
            detail, exit_code=EXIT_AUTH_FAILURE if status_code is not None else None
        )

    @classmethod
    def from_status(cls, status_code: int, url: str) -> RequestError:
        """Build the error for a response whose status was not 2xx."""
        return cls(
            f"Download error: status code {status_code} while requesting {url}",
            status_code=status_code,
            url=url,
        )


class JsonError(AccountError):
    """The response body did not match the expected JSON shape.

    Attributes:
        text: The raw body that failed to decode.
    """

    def __init__(self, reason: str, text: str):
        self.reason = reason
        self.text = text
        super().__init__(f"JSON error: {reason}\nResponse body:\n{text}")


class AccountResponseError(AccountError):
    """The server answered with its own ``{error, errorMessage}`` payload.

    Both fields are carried verbatim.
    """

    def __init__(self, error: str, error_message: str):
        self.error = error
        self.error_message = error_message
        super().__init__(f"\n{error}: {error_message}")


class MissingProfileError(AccountError):
    """The login response decoded but had no ``selectedProfile``."""

    def __init__(self) -> None:
        super().__init__(
            "\nInvalid Response from server: missing selected profile"
        )


class InvalidProviderUrlError(AccountError):
    """A user-supplied provider URL could not be used.

    Attributes:
        reason: Why the URL was rejected.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"\nCan't parse provider url: {reason}")


class UnsupportedAccountTypeError(AccountError):
    """An account type that the Yggdrasil engine cannot serve."""

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, account_type: str):
        self.account_type = account_type
        super().__init__(
            f"\n{account_type} accounts are not handled by the Yggdrasil login flow"
        )


_NOT_ACTIVATABLE_HINT = (
    "Try installing gnome-keyring and libsecret packages\n"
    "(may be called differently depending on your distro)"
)

_LOCKED_KEYRING_HINT = """Install the "seahorse" app and open it,
Check for "Login" in the sidebar.
If it's there, make sure it's unlocked (right-click -> Unlock)

If it's not there, click on + then "Password Keyring",
and name it "Login" and put your preferred password

Now after this, in the sidebar, right click it and click "Set as Default\""""


def keyring_hint(reason: str) -> Optional[str]:
    """Return a fix-it hint for well-known Linux secret-service failures."""
    if not sys.platform.startswith("linux"):
        return None
    if "The name is not activatable" in reason:
        return _NOT_ACTIVATABLE_HINT
    if "no result found" in reason:
        return _LOCKED_KEYRING_HINT
    return None


class KeyringError(AccountError):
    """The platform secret store failed."""

    exit_code = EXIT_KEYRING_ERROR

    def __init__(self, reason: str):
        self.reason = reason
        message = f"\nAccount keyring error:\n{reason}"
        hint = keyring_hint(reason)
        if hint:
            message = f"{message}\n\n{hint}"
        super().__init__(message)


class NoEntryError(KeyringError):
    """No secret is stored under the requested key."""

    def __init__(self, key: str = ""):
        self.key = key
        reason = "No matching entry found in secure storage"
        if key:
            reason = f"{reason} ({key})"
        super().__init__(reason)
