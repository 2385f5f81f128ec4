"""Built-in CLI sub-commands for yggauth.

* :mod:`~yggauth.commands.account` -- log in, refresh, invalidate, log out,
  and list saved accounts.
* :mod:`~yggauth.commands.config` -- view and modify settings.

Each module exports a :class:`typer.Typer` sub-application that
:func:`yggauth.app.main` mounts on the root app.
"""
