"""Synchronous HTTP transport for the Yggdrasil protocol.

:class:`YggdrasilClient` wraps :class:`httpx.Client` and exposes the one
operation the login engine needs: POST a JSON body and hand back the raw
:class:`httpx.Response`, whatever its status.  Interpreting the status and
the body is left to :mod:`yggauth.auth.protocol`, because the auth servers
put meaningful error payloads behind non-2xx statuses.

Network-level failures (DNS, refused connections, timeouts) are converted
into :class:`~yggauth.exceptions.RequestError`.  Nothing is retried; retry
policy belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from yggauth.config import Settings
from yggauth.exceptions import RequestError

logger = logging.getLogger(__name__)


class YggdrasilClient:
    """Blocking JSON-over-HTTP client.

    Usable as a context manager, in which case the underlying connection
    pool is closed on exit.  An existing :class:`httpx.Client` can be passed
    in, which is how tests plug in an :class:`httpx.MockTransport`.

    Args:
        settings: Timeout, TLS verification, and User-Agent to use when
            creating the underlying client.
        http_client: Pre-built client; *settings* is ignored when given.

    Example::

        with YggdrasilClient(Settings()) as client:
            response = client.post_json(
                "https://drasl.example.com/auth/authenticate", {"username": "alice"}
            )
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        settings = settings or Settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=settings.timeout,
            verify=settings.verify_ssl,
            follow_redirects=True,
            headers={"User-Agent": settings.user_agent},
        )

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> YggdrasilClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def post_json(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        """POST *payload* as JSON to *url* and return the response as-is.

        The body is read before returning, so ``response.text`` and
        ``response.url`` are available to the caller.

        Raises:
            RequestError: On connection, timeout, or other transport errors.
        """
        logger.debug("POST %s", url)
        try:
            response = self._client.post(
                url,
                json=payload,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise RequestError(f"Request to {url} failed: {exc}", url=url) from exc
        logger.debug("POST %s -> %s", response.url, response.status_code)
        return response
