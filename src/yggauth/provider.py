"""Yggdrasil provider descriptor.

A :class:`YggdrasilProvider` names one auth server speaking the
Yggdrasil protocol, either self-hosted (Drasl, blessing-skin, ...) or a
well-known service such as Ely.by.  The provider URL is the location of the
``authenticate`` endpoint; the sibling ``refresh`` and ``invalidate``
endpoints are resolved relative to it, so both
``https://drasl.example.com/auth/`` and
``https://authserver.ely.by/auth/authenticate`` work as-is.

URLs are validated once, when the descriptor is created, so that every
descriptor in circulation has a host to derive its :meth:`domain` from.
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, field_validator

from yggauth.exceptions import InvalidProviderUrlError

_MISSING_HOST = "Url must have a host for example: https://example.com/authenticate"


def _parse_url(raw: str) -> httpx.URL:
    try:
        url = httpx.URL(raw.strip())
    except httpx.InvalidURL as exc:
        raise InvalidProviderUrlError(str(exc)) from exc
    # A scheme-less string parses as a relative path, so both checks land here.
    if not url.scheme or not url.host:
        raise InvalidProviderUrlError(_MISSING_HOST)
    if url.port is not None and not 0 <= url.port <= 65535:
        raise InvalidProviderUrlError(f"invalid port number {url.port}")
    return url


class YggdrasilProvider(BaseModel):
    """Location of a Yggdrasil-protocol auth server.

    Instances are immutable and hashable.  Create them with :meth:`parse`
    when the URL comes from the user.

    Example::

        provider = YggdrasilProvider.parse("https://drasl.example.com/auth/")
        provider.domain()                  # "drasl.example.com"
        provider.endpoint("refresh")       # "https://drasl.example.com/auth/refresh"
    """

    model_config = ConfigDict(frozen=True)

    url: str

    @field_validator("url", mode="before")
    @classmethod
    def _validate_url(cls, value: object) -> str:
        if not isinstance(value, str):
            raise InvalidProviderUrlError(f"expected a string, got {type(value).__name__}")
        return str(_parse_url(value))

    @classmethod
    def parse(cls, raw_url: str) -> YggdrasilProvider:
        """Validate *raw_url* and build a provider from it.

        Raises:
            InvalidProviderUrlError: If the URL cannot be parsed, is
                relative, or has no host component.
        """
        return cls(url=raw_url)

    def domain(self) -> str:
        """The host of the auth server as written in the URL, e.g. ``"authserver.ely.by"``.

        Internationalized hosts are returned in their punycode form.
        """
        return httpx.URL(self.url).raw_host.decode("ascii")

    def endpoint(self, name: str) -> str:
        """Resolve a protocol endpoint (``authenticate``, ``refresh``, ...) against the URL."""
        return str(httpx.URL(self.url).join(name))

    def __str__(self) -> str:
        return self.url
