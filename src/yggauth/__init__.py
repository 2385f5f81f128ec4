"""yggauth -- log into Yggdrasil-protocol game accounts (Ely.by, Drasl, ...).

Turns a username/password or a stored session into a normalized
:class:`~yggauth.models.AccountData`, keeps the session token in the
platform keyring, and maps the different error payloads of the auth servers
onto one exception family.

Typical usage::

    from yggauth.auth import YggdrasilAuthenticator

    with YggdrasilAuthenticator.from_settings() as auth:
        account = auth.login_new("https://drasl.example.com/auth/", "alice", "hunter2")
        account = auth.login_refresh(account)

Modules:
    app: Typer application and CLI entry point.
    auth: The login engine and the Ely.by variant.
    models: Pydantic account and wire models.
    provider: Provider descriptor and URL validation.
    secret_store: Keyring-backed token storage.
    accounts: Non-secret account registry on disk.
    config: XDG-aware settings.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
