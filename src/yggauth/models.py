"""Canonical Pydantic models shared across all yggauth modules.

The models fall into two groups:

**Account models** -- the provider-agnostic output of a login, consumed by
the rest of the launcher:
    :class:`AccountKind`, :class:`AccountType`, :class:`AccountData`, and
    :class:`NeedsOTP`.

**Wire models** -- JSON shapes of the Yggdrasil protocol, with camelCase
aliases matching the server payloads:
    :class:`Agent`, :class:`SelectedProfile`, :class:`LoginResponse`, and
    :class:`ErrorResponse`.

Token fields use :class:`~pydantic.SecretStr` so that printing or logging an
account never leaks a session; reading the value is an explicit
``get_secret_value()`` call.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from yggauth.provider import YggdrasilProvider


# --- Account models ---


class AccountKind(str, enum.Enum):
    """The closed set of login backends."""

    MICROSOFT = "microsoft"
    ELYBY = "elyby"
    YGGDRASIL = "yggdrasil"


_DISPLAY_NAMES = {
    AccountKind.MICROSOFT: "Microsoft",
    AccountKind.ELYBY: "ElyBy",
    AccountKind.YGGDRASIL: "Drasl",
}


class AccountType(BaseModel):
    """Which backend an account belongs to.

    ``provider`` is set exactly when ``kind`` is
    :attr:`AccountKind.YGGDRASIL`.  Use the constructors rather than
    building instances by hand::

        AccountType.microsoft()
        AccountType.elyby()
        AccountType.yggdrasil(YggdrasilProvider.parse("https://drasl.example.com/auth/"))
    """

    model_config = ConfigDict(frozen=True)

    kind: AccountKind
    provider: Optional[YggdrasilProvider] = None

    @model_validator(mode="after")
    def _check_provider(self) -> AccountType:
        if self.kind == AccountKind.YGGDRASIL and self.provider is None:
            raise ValueError("Yggdrasil accounts need a provider")
        if self.kind != AccountKind.YGGDRASIL and self.provider is not None:
            raise ValueError(f"{self.kind.value} accounts do not take a provider")
        return self

    @classmethod
    def microsoft(cls) -> AccountType:
        return cls(kind=AccountKind.MICROSOFT)

    @classmethod
    def elyby(cls) -> AccountType:
        return cls(kind=AccountKind.ELYBY)

    @classmethod
    def yggdrasil(cls, provider: YggdrasilProvider) -> AccountType:
        return cls(kind=AccountKind.YGGDRASIL, provider=provider)

    def __str__(self) -> str:
        return _DISPLAY_NAMES[self.kind]


class AccountData(BaseModel):
    """A logged-in (or previously logged-in) account.

    Attributes:
        access_token: Session token; ``None`` when there is no valid session.
        client_token: Client identifier issued by the server at login.
        uuid: Player id from the server's selected profile.
        refresh_token: Token used to refresh the session.  For the
            Yggdrasil family this is the current access token.
        needs_refresh: Set when a privileged call rejected
            ``access_token``; the caller should refresh before retrying.
        username: The login identifier the user typed (may be an email).
        nice_username: Display name confirmed by the server.
        account_type: Backend the account belongs to.
    """

    access_token: Optional[SecretStr] = None
    client_token: str
    uuid: str
    refresh_token: SecretStr
    needs_refresh: bool = False

    username: str
    nice_username: str

    account_type: AccountType

    def username_modified(self) -> str:
        """Username with a suffix naming the backend, for account pickers."""
        kind = self.account_type.kind
        if kind == AccountKind.MICROSOFT:
            suffix = ""
        elif kind == AccountKind.ELYBY:
            suffix = " (elyby)"
        else:
            suffix = f" ({self.account_type.provider})"
        return f"{self.username}{suffix}"

    def is_elyby(self) -> bool:
        return self.account_type.kind == AccountKind.ELYBY


class NeedsOTP(BaseModel):
    """Ely.by login outcome for accounts protected with two-factor auth."""

    username: str


# --- Wire models ---


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Agent(_WireModel):
    """The ``agent`` object sent with authenticate and invalidate requests."""

    name: str = "Minecraft"
    version: int = 1


class SelectedProfile(_WireModel):
    id: str
    name: str


class LoginResponse(_WireModel):
    """Success body of ``authenticate`` and ``refresh``."""

    access_token: str = Field(alias="accessToken")
    client_token: str = Field(alias="clientToken")
    selected_profile: Optional[SelectedProfile] = Field(
        default=None, alias="selectedProfile"
    )


class ErrorResponse(_WireModel):
    """Error body returned by any endpoint: ``{"error": ..., "errorMessage": ...}``."""

    error: str
    error_message: str = Field(alias="errorMessage")

    def __str__(self) -> str:
        return f"{self.error}: {self.error_message}"
