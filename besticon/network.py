# SPDX-License-Identifier: AGPL-3.0-or-later
"""HTTP for besticon.

A :py:obj:`Network` holds the configuration of the outgoing requests and
creates the ``httpx.AsyncClient`` for one discovery call.  The client (its
connection pool, cookie jar and redirect policy) is shared by all concurrent
fetches of this call and closed afterwards.

The size of a response body is limited while it is streamed, a body that
reaches :py:obj:`NetworkConfig.max_response_body_size` is an error and not a
truncated success.
"""

from __future__ import annotations

__all__ = ["DEFAULT_USER_AGENT", "NetworkConfig", "Network"]

import time

import httpx
import msgspec

from besticon import logger
from besticon.exceptions import BodyTooLargeException

logger = logger.getChild('network')

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 10_0 like Mac OS X) AppleWebKit/602.1.38"
    " (KHTML, like Gecko) Version/10.0 Mobile/14A5297c Safari/602.1"
)


class NetworkConfig(msgspec.Struct):  # pylint: disable=too-few-public-methods
    """Configuration of the outgoing HTTP requests."""

    timeout: float = 5.0
    """Timeout (sec.) of one HTTP request."""

    max_redirects: int = 10
    """Maximum number of redirects that are followed."""

    user_agent: str = DEFAULT_USER_AGENT
    """Value of the HTTP ``User-Agent`` header."""

    max_response_body_size: int = 10 * 1024 * 1024  # 10 MB
    """Limit of a response body in bytes."""

    verify: bool = True
    """Verify the TLS certificates."""

    enable_http2: bool = False

    max_concurrency: int = 0
    """Maximum number of candidates which are fetched at the same time, ``0``
    means all candidates are fetched at once."""


class Network:
    """Outgoing HTTP requests of a discovery.  For tests a ``transport``
    (e.g. ``httpx.MockTransport``) can be passed which is used instead of the
    network.

    The cookie jar of a client is a plain ``httpx.Cookies`` jar: cookies are
    scoped by httpx's domain matching only, there is no public suffix list
    that would reject cookies set for a public suffix (e.g. ``co.uk``)."""

    def __init__(self, cfg: NetworkConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.cfg = cfg or NetworkConfig()
        self.transport = transport

    def new_client(self) -> httpx.AsyncClient:
        """Create a new client, the caller has to close it (``async with``)."""
        transport = self.transport
        if transport is None:
            transport = httpx.AsyncHTTPTransport(verify=self.cfg.verify, http2=self.cfg.enable_http2)
        return httpx.AsyncClient(
            transport=transport,
            headers={"Accept": "*/*", "User-Agent": self.cfg.user_agent},
            cookies=httpx.Cookies(),
            follow_redirects=True,
            max_redirects=self.cfg.max_redirects,
            timeout=self.cfg.timeout,
        )

    async def get(self, client: httpx.AsyncClient, url: str) -> tuple[httpx.Response, bytes]:
        """Sends a GET request and reads the body.  Returns the response (its
        ``url`` is the URL after redirects) and the body.  Raises
        ``httpx.HTTPError`` (and ``httpx.InvalidURL``) on network errors and
        :py:obj:`BodyTooLargeException` if the body is too large."""

        start = time.monotonic()
        try:
            async with client.stream("GET", url) as response:
                body = await self.read_body(response)
        except (httpx.HTTPError, httpx.InvalidURL, BodyTooLargeException) as exc:
            self.log_error(url, exc, time.monotonic() - start)
            raise
        self.log_response(response, len(body), time.monotonic() - start)
        return response, body

    async def read_body(self, response: httpx.Response) -> bytes:
        limit = self.cfg.max_response_body_size
        data = bytearray()
        async for chunk in response.aiter_bytes():
            data.extend(chunk)
            if len(data) >= limit:
                raise BodyTooLargeException(str(response.request.url), limit)
        return bytes(data)

    def log_response(self, response: httpx.Response, length: int, duration: float):
        request = response.request
        logger.debug(
            "%s %s %d %.2fms %d",
            request.method,
            request.url,
            response.status_code,
            duration * 1000,
            length,
        )

    def log_error(self, url: str, exc: Exception, duration: float):
        logger.debug("Error: GET %s %s %.2fms", url, exc, duration * 1000)
