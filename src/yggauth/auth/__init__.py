"""Login engine for Yggdrasil-protocol accounts.

The main entry points are:

- :class:`YggdrasilAuthenticator` -- ``login_new``, ``login_refresh``,
  ``invalidate``, and ``logout`` against any Yggdrasil server.
- :func:`login_elyby` -- Ely.by login, which may answer
  :class:`~yggauth.models.NeedsOTP`.

Typical usage::

    from yggauth.auth import YggdrasilAuthenticator, login_elyby

    with YggdrasilAuthenticator.from_settings() as auth:
        result = login_elyby(auth, "alice@example.com", "hunter2")
"""

from yggauth.auth.elyby import login_new as login_elyby
from yggauth.auth.yggdrasil import YggdrasilAuthenticator

__all__ = ["YggdrasilAuthenticator", "login_elyby"]
