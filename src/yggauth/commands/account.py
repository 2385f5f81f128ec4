"""Account commands -- log in, refresh, invalidate, and log out.

Provides the ``yggauth account`` sub-command group.  Every command takes a
``--provider`` option that is either ``elyby`` or the authenticate URL of a
self-hosted Yggdrasil server.

Typical workflow::

    yggauth account login alice --provider https://drasl.example.com/auth/
    yggauth account refresh alice --provider https://drasl.example.com/auth/
    yggauth account list
    yggauth account logout alice --provider https://drasl.example.com/auth/
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import typer

from yggauth.exit_codes import EXIT_AUTH_FAILURE
from yggauth.output import error, get_output, info, success, suggest, warning

account_app = typer.Typer(no_args_is_help=True)

ELYBY = "elyby"

_PROVIDER_OPTION = typer.Option(
    ...,
    "--provider",
    "-P",
    help="'elyby' or the authenticate URL of a Yggdrasil server.",
)


@contextmanager
def _exit_on_error() -> Iterator[None]:
    """Print :class:`~yggauth.exceptions.YggauthError` and exit with its code."""
    from yggauth.exceptions import YggauthError

    try:
        yield
    except YggauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _account_type(provider: str):  # noqa: ANN202
    """Map the ``--provider`` option to an :class:`~yggauth.models.AccountType`."""
    from yggauth.models import AccountType
    from yggauth.provider import YggdrasilProvider

    if provider.strip().lower() == ELYBY:
        return AccountType.elyby()
    return AccountType.yggdrasil(YggdrasilProvider.parse(provider))


def _open():  # noqa: ANN202
    """Create the authenticator and the account registry sharing one keyring store."""
    from yggauth.accounts import AccountRegistry
    from yggauth.auth import YggdrasilAuthenticator

    auth = YggdrasilAuthenticator.from_settings()
    return auth, AccountRegistry(auth.store)


def _load_account(auth, registry, username: str, account_type):  # noqa: ANN001, ANN202
    domain = auth.provider_for(account_type).domain()
    account = registry.load(username, domain)
    if account is None:
        error(f'No saved account "{username}" on {domain}.')
        suggest(f"Log in first: yggauth account login {username} --provider ...")
        raise typer.Exit(code=2)
    return account, domain


@account_app.command("login")
def account_login(
    username: str = typer.Argument(help="Username or email to log in with."),
    provider: str = _PROVIDER_OPTION,
    password: Optional[str] = typer.Option(
        None, "--password", help="Password (prompted for when omitted)."
    ),
) -> None:
    """Log in with a username and password and remember the account.

    Example::

        yggauth account login alice --provider elyby
        yggauth account login alice --provider https://drasl.example.com/auth/
    """
    from yggauth.auth import login_elyby
    from yggauth.models import AccountKind, NeedsOTP

    with _exit_on_error():
        account_type = _account_type(provider)
        if password is None:
            password = typer.prompt("Password", hide_input=True)

        auth, registry = _open()
        with auth:
            if account_type.kind == AccountKind.ELYBY:
                result = login_elyby(auth, username, password)
            else:
                result = auth.login_new(account_type.provider, username, password)

            if isinstance(result, NeedsOTP):
                error(f'Account "{username}" is protected with two factor auth.')
                raise typer.Exit(code=EXIT_AUTH_FAILURE)

            domain = auth.provider_for(account_type).domain()
            registry.save(result, domain)

    success(f'Logged in as "{result.nice_username}" ({result.username_modified()}).')


@account_app.command("refresh")
def account_refresh(
    username: str = typer.Argument(help="Username the account was saved under."),
    provider: str = _PROVIDER_OPTION,
) -> None:
    """Refresh the session of a saved account.

    Example::

        yggauth account refresh alice --provider elyby
    """
    with _exit_on_error():
        account_type = _account_type(provider)
        auth, registry = _open()
        with auth:
            account, domain = _load_account(auth, registry, username, account_type)
            if account.access_token is None:
                warning("No stored session; the server will most likely reject the refresh.")
            account = auth.login_refresh(account)
            registry.save(account, domain)

    success(f'Session refreshed for "{account.nice_username}".')


@account_app.command("invalidate")
def account_invalidate(
    username: str = typer.Argument(help="Username the account was saved under."),
    provider: str = _PROVIDER_OPTION,
) -> None:
    """Revoke the session of a saved account on the server.

    The account stays saved; the local session token is dropped.

    Example::

        yggauth account invalidate alice --provider https://drasl.example.com/auth/
    """
    with _exit_on_error():
        account_type = _account_type(provider)
        auth, registry = _open()
        with auth:
            account, domain = _load_account(auth, registry, username, account_type)
            auth.invalidate(account)
            registry.clear_session(username, domain)

    success(f'Session invalidated for "{username}".')


@account_app.command("logout")
def account_logout(
    username: str = typer.Argument(help="Username the account was saved under."),
    provider: str = _PROVIDER_OPTION,
) -> None:
    """Forget a saved account and its stored session.

    The session is not revoked on the server; run ``invalidate`` first for
    that.

    Example::

        yggauth account logout alice --provider elyby
    """
    with _exit_on_error():
        account_type = _account_type(provider)
        auth, registry = _open()
        with auth:
            auth.logout(account_type, username)
            removed = registry.remove(username, auth.provider_for(account_type).domain())

    if removed:
        success(f'Logged out "{username}".')
    else:
        info(f'No saved account "{username}"; cleared any stored session.')


@account_app.command("list")
def account_list() -> None:
    """List saved accounts.

    Example::

        yggauth account list
        yggauth --json account list
    """
    from yggauth.accounts import AccountRegistry
    from yggauth.config import load_settings
    from yggauth.secret_store import SecretStore

    with _exit_on_error():
        registry = AccountRegistry(SecretStore(load_settings().keyring_service))
        records = registry.list_accounts()

    if not records:
        info("No accounts saved.")
        suggest("Log in: yggauth account login <username> --provider <elyby|url>")
        return

    rows = [
        [r.username, r.nice_username, str(r.account_type), r.domain, r.uuid]
        for r in records
    ]
    get_output().print_table(
        ["Username", "Name", "Type", "Server", "UUID"], rows, title="Saved Accounts"
    )
