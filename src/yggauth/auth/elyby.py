"""Ely.by accounts.

Ely.by speaks the Yggdrasil protocol from a fixed, well-known server, so
its accounts go through :class:`~yggauth.auth.yggdrasil.YggdrasilAuthenticator`
unchanged except for login: accounts with two-factor auth enabled answer
``authenticate`` with a ``ForbiddenOperationException`` that is reported as
:class:`~yggauth.models.NeedsOTP` instead of an error.

Both usernames and email addresses are accepted as the login identifier.
"""

from __future__ import annotations

from typing import Union

from yggauth.auth.yggdrasil import YggdrasilAuthenticator
from yggauth.models import AccountData, AccountType, NeedsOTP


def login_new(
    auth: YggdrasilAuthenticator, email: str, password: str
) -> Union[AccountData, NeedsOTP]:
    """Log into Ely.by with a username or email and a password.

    Returns:
        The logged-in account, or :class:`NeedsOTP` when the account is
        protected with two-factor auth.

    Raises:
        AccountError: Any other failure, as for
            :meth:`YggdrasilAuthenticator.login_new`.
    """
    return auth.login(auth.elyby_provider(), AccountType.elyby(), email, password)
