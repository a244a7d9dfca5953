"""Transport contract and the bundled :mod:`httpx` transport.

The cache only ever talks to the network through :class:`Transport`:
"perform verb V on URL U with an optional body and extra arguments, and
return a response or raise". Any object with a matching ``request`` method
works, which keeps the cache testable with in-memory fakes.

:class:`HttpxTransport` is the default implementation. It wraps
:class:`httpx.Client` and layers on:

- **Body encoding** -- ``dict``/``list`` bodies are sent as JSON,
  ``str``/``bytes`` bodies as raw content.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).
- **Error mapping** -- non-success statuses raise typed
  :class:`~reqcache.exceptions.TransportError` subclasses, so a returned
  response always means success.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from reqcache.exceptions import (
    AuthError,
    ClientError,
    ConnectionError_,
    NotFoundError,
    ServerError,
    TransportError,
)
from reqcache.models import RequestConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Anything able to perform an HTTP request for a session."""

    def request(self, method: str, url: str, body: Any = None, **kwargs: Any) -> Any:
        """Perform *method* on *url* and return the response, raising on failure."""
        ...


class HttpxTransport:
    """Blocking transport backed by :class:`httpx.Client`.

    Extra keyword arguments given to :meth:`request` (``headers``,
    ``params``, ``cookies``, ``auth``, ...) are forwarded to
    :meth:`httpx.Client.request` untouched.

    Args:
        config: Timeout, SSL verification and retry settings.
        client: Pre-built client to use instead of creating one (mainly
            for tests with :class:`httpx.MockTransport`).

    Example::

        with HttpxTransport(RequestConfig(timeout=10)) as transport:
            response = transport.request("GET", "https://api.example.com/users")
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
        )

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def request(self, method: str, url: str, body: Any = None, **kwargs: Any) -> httpx.Response:
        """Send a request and return the successful response.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            url: Absolute request URL.
            body: Request body; JSON-encoded for ``dict``/``list``, sent
                raw for ``str``/``bytes``.
            **kwargs: Forwarded to :meth:`httpx.Client.request`.

        Returns:
            The fully read :class:`httpx.Response`.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ClientError: On any other 4xx.
            ServerError: On 5xx after all retries are exhausted.
            ConnectionError_: On network / timeout errors after all retries.
        """
        request_kwargs = dict(kwargs)
        if body is not None:
            if isinstance(body, (str, bytes)):
                request_kwargs["content"] = body
            else:
                request_kwargs["json"] = body

        response = self._execute_with_retry(method.upper(), url, request_kwargs)
        self._map_response_error(response)
        return response

    def _execute_with_retry(
        self,
        method: str,
        url: str,
        kwargs: dict[str, Any],
    ) -> httpx.Response:
        """Execute the request, retrying on 5xx and connection errors.

        The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        max_retries = self._config.max_retries

        for attempt in range(max_retries + 1):
            try:
                response = self._client.request(method, url, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    logger.debug(
                        "Connection error: %s, retrying in %ss (attempt %d/%d)",
                        exc, delay, attempt + 1, max_retries,
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                logger.debug(
                    "Server error %d, retrying in %ss (attempt %d/%d)",
                    response.status_code, delay, attempt + 1, max_retries,
                )
                time.sleep(delay)
                continue
            return response

        raise TransportError("Request failed after all retries")  # pragma: no cover

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status in (401, 403):
            raise AuthError(full_msg, status_code=status, response=response)
        if status == 404:
            raise NotFoundError(full_msg, status_code=status, response=response)
        if status >= 500:
            raise ServerError(full_msg, status_code=status, response=response)
        raise ClientError(full_msg, status_code=status, response=response)
