"""Login engine for Yggdrasil-protocol auth servers.

:class:`YggdrasilAuthenticator` implements the session lifecycle shared by
self-hosted Yggdrasil servers and Ely.by:

1. :meth:`~YggdrasilAuthenticator.login_new` -- exchange a username and
   password for a session (``authenticate``).
2. :meth:`~YggdrasilAuthenticator.login_refresh` -- rotate the session
   using the stored token (``refresh``).
3. :meth:`~YggdrasilAuthenticator.invalidate` -- revoke the session on the
   server (``invalidate``).
4. :meth:`~YggdrasilAuthenticator.logout` -- forget the session locally.

After every successful login or refresh the new access token is written to
the keyring before the :class:`~yggauth.models.AccountData` is handed back,
so the in-memory session and the stored one never diverge on success.

Provider-specific steps are chosen by checking the account's
:class:`~yggauth.models.AccountKind`; the Ely.by two-factor branch lives in
:meth:`~YggdrasilAuthenticator.login` and is reached through
:mod:`yggauth.auth.elyby`.

See Also:
    :mod:`yggauth.auth.protocol` for payloads and response decoding.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import SecretStr

from yggauth.auth import protocol
from yggauth.client import YggdrasilClient
from yggauth.config import Settings, load_settings
from yggauth.exceptions import (
    AccountResponseError,
    KeyringError,
    NoEntryError,
    UnsupportedAccountTypeError,
)
from yggauth.models import (
    AccountData,
    AccountKind,
    AccountType,
    ErrorResponse,
    LoginResponse,
    NeedsOTP,
)
from yggauth.provider import YggdrasilProvider
from yggauth.secret_store import SecretStore, entry_key

logger = logging.getLogger(__name__)


class YggdrasilAuthenticator:
    """Log accounts into Yggdrasil-protocol servers and manage their sessions.

    Args:
        client: Transport used for every request.
        store: Keyring wrapper holding the session tokens.
        settings: Settings supplying the Ely.by endpoint.  Defaults to
            built-in defaults.

    Example::

        with YggdrasilAuthenticator.from_settings() as auth:
            account = auth.login_new("https://drasl.example.com/auth/", "alice", "pw")
            account = auth.login_refresh(account)
            auth.invalidate(account)
    """

    def __init__(
        self,
        client: YggdrasilClient,
        store: SecretStore,
        settings: Optional[Settings] = None,
    ) -> None:
        self._client = client
        self._store = store
        self._settings = settings or Settings()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> YggdrasilAuthenticator:
        """Build an authenticator with a fresh HTTP client and the platform keyring."""
        settings = settings or load_settings()
        return cls(
            YggdrasilClient(settings),
            SecretStore(settings.keyring_service),
            settings,
        )

    def __enter__(self) -> YggdrasilAuthenticator:
        return self

    def __exit__(self, *args: object) -> None:
        self._client.close()

    @property
    def store(self) -> SecretStore:
        return self._store

    # ------------------------------------------------------------------ #
    # Provider dispatch
    # ------------------------------------------------------------------ #

    def elyby_provider(self) -> YggdrasilProvider:
        """The well-known Ely.by auth server."""
        return YggdrasilProvider.parse(self._settings.elyby_url)

    def provider_for(self, account_type: AccountType) -> YggdrasilProvider:
        """Return the auth server that serves *account_type*.

        Raises:
            UnsupportedAccountTypeError: For Microsoft accounts, which use
                the OAuth device-code flow instead.
        """
        if account_type.kind == AccountKind.ELYBY:
            return self.elyby_provider()
        if account_type.kind == AccountKind.YGGDRASIL:
            assert account_type.provider is not None
            return account_type.provider
        raise UnsupportedAccountTypeError(str(account_type))

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def login_new(
        self,
        url: Union[str, YggdrasilProvider],
        username: str,
        password: str,
    ) -> AccountData:
        """Log into a self-hosted Yggdrasil server with a username and password.

        Args:
            url: The server's authenticate URL (validated with
                :meth:`YggdrasilProvider.parse`) or a ready provider.
            username: Login name or email.
            password: Account password.

        Returns:
            The logged-in account, with its token already in the keyring.

        Raises:
            InvalidProviderUrlError: *url* is relative or has no host.
            RequestError: Network failure, or an error status without an
                error payload.
            AccountResponseError: The server answered with an error payload.
            JsonError: The body matched neither the success nor the error shape.
            MissingProfileError: The server did not select a profile.
            KeyringError: The token could not be stored.
        """
        provider = url if isinstance(url, YggdrasilProvider) else YggdrasilProvider.parse(url)
        result = self.login(provider, AccountType.yggdrasil(provider), username, password)
        assert isinstance(result, AccountData)
        return result

    def login(
        self,
        provider: YggdrasilProvider,
        account_type: AccountType,
        username: str,
        password: str,
    ) -> Union[AccountData, NeedsOTP]:
        """Authenticate against *provider* and build an account of *account_type*.

        Only Ely.by accounts can come back as :class:`NeedsOTP`; for every
        other type the two-factor answer is raised like any other error
        payload.
        """
        logger.info("Logging into %s account... (%s)", provider.domain(), username)
        response = self._client.post_json(
            provider.endpoint(protocol.AUTHENTICATE),
            protocol.authenticate_payload(username, password),
        )
        outcome = protocol.interpret_login(response)
        if isinstance(outcome, ErrorResponse):
            if account_type.kind == AccountKind.ELYBY and protocol.is_two_factor_challenge(
                outcome
            ):
                logger.info("%s account %s needs a one-time password", provider.domain(), username)
                return NeedsOTP(username=username)
            raise AccountResponseError(outcome.error, outcome.error_message)

        profile = protocol.require_profile(outcome)
        self._store.set(entry_key(username, provider.domain()), outcome.access_token)

        return AccountData(
            access_token=outcome.access_token,
            client_token=outcome.client_token,
            uuid=profile.id,
            refresh_token=outcome.access_token,
            needs_refresh=False,
            username=username,
            nice_username=profile.name,
            account_type=account_type,
        )

    def login_refresh(self, account: AccountData) -> AccountData:
        """Rotate the session of *account* and return the refreshed copy.

        *account* itself is left untouched.

        Raises:
            UnsupportedAccountTypeError: *account* is a Microsoft account.
            RequestError: Network failure, or an error status without an
                error payload.
            AccountResponseError: The server rejected the refresh.
            JsonError: The body matched neither shape.
            MissingProfileError: The server did not select a profile.
            KeyringError: The new token could not be stored.
        """
        provider = self.provider_for(account.account_type)
        key = entry_key(account.username, provider.domain())
        logger.info("Refreshing %s account... (%s)", provider.domain(), account.username)

        response = self._client.post_json(
            provider.endpoint(protocol.REFRESH),
            protocol.refresh_payload(
                account.refresh_token.get_secret_value(), account.client_token
            ),
        )
        outcome = protocol.interpret_login(response)
        if isinstance(outcome, ErrorResponse):
            raise AccountResponseError(outcome.error, outcome.error_message)
        return self._apply_refresh(account, outcome, key)

    def _apply_refresh(
        self, account: AccountData, outcome: LoginResponse, key: str
    ) -> AccountData:
        profile = protocol.require_profile(outcome)
        self._store.set(key, outcome.access_token)
        return account.model_copy(
            update={
                "access_token": SecretStr(outcome.access_token),
                "client_token": outcome.client_token,
                "uuid": profile.id,
                "nice_username": profile.name,
                "refresh_token": SecretStr(outcome.access_token),
                "needs_refresh": False,
            }
        )

    def invalidate(self, account: AccountData) -> None:
        """Revoke the session of *account* on the server.

        The caller is responsible for dropping ``account.access_token``
        afterwards; this method does not modify *account*.

        Raises:
            NoEntryError: *account* has no access token.  Raised before
                any request is sent.
            UnsupportedAccountTypeError: *account* is a Microsoft account.
            RequestError: Network failure.
            AccountResponseError: The server refused, with its own error
                payload or a synthesized one when the body is unreadable.
        """
        if account.access_token is None:
            raise NoEntryError()
        provider = self.provider_for(account.account_type)

        response = self._client.post_json(
            provider.endpoint(protocol.INVALIDATE),
            protocol.invalidate_payload(
                account.access_token.get_secret_value(), account.client_token
            ),
        )
        # The body is empty on success.
        if response.is_success:
            return

        error = protocol.decode_error(response.text)
        if error is None:
            raise AccountResponseError(
                "Cant parse unsuccessful response",
                "cant parse Error into AccountResponseError",
            )
        raise AccountResponseError(error.error, error.error_message)

    def logout(self, account_type: AccountType, username: str) -> None:
        """Forget the stored session of *username*.

        Removing the keyring entry is best-effort: failures, including a
        missing entry, are logged as warnings.  The token is not revoked on
        the server.

        Raises:
            UnsupportedAccountTypeError: *account_type* is Microsoft.
        """
        # TODO: revoke the token with invalidate() before dropping it locally.
        provider = self.provider_for(account_type)
        try:
            self._store.delete(entry_key(username, provider.domain()))
        except NoEntryError:
            logger.warning(
                "No stored %s account credential to remove (Username: %s)",
                provider.domain(),
                username,
            )
        except KeyringError as exc:
            logger.warning(
                "Couldn't remove %s account credential (Username: %s):\n%s",
                provider.domain(),
                username,
                exc.detail,
            )
