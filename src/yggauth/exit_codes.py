"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~yggauth.exceptions.YggauthError` subclass.
Shell wrappers around the launcher can inspect the exit code to tell a
rejected password apart from an unreachable auth server without parsing
stderr.

Example::

    $ yggauth login alice --provider https://drasl.example.com/auth/
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- credentials were rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. a relative provider URL)."""

EXIT_AUTH_FAILURE = 3
"""The auth server rejected the request or returned an unusable response."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_KEYRING_ERROR = 8
"""The platform secret store could not be read or written."""
