"""Cache key canonicalisation.

A cache key is the request URL in canonical form: scheme, host, path
(never empty, at least ``/``) and a query string whose items are sorted,
so that ``?b=2&a=1`` and ``?a=1&b=2`` resolve to the same entry.
Fragments never reach the server and are dropped.

Keys stay readable strings (unlike hashed keys) because invalidation
directives match on them by equality, prefix and regular expression.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Optional

import httpx

BODY_PARAM = "POST"
"""Query item that carries the body digest in ``cached_post`` keys."""


def body_digest(body: Any) -> str:
    """Return a SHA-256 hex digest identifying a request body.

    ``bytes`` and ``str`` bodies are hashed as-is; anything else is
    serialised as JSON with sorted keys first, so equal payloads always
    produce the same digest.
    """
    if isinstance(body, bytes):
        raw = body
    elif isinstance(body, str):
        raw = body.encode()
    else:
        raw = json.dumps(body, sort_keys=True, separators=(",", ":"), default=str).encode()
    return hashlib.sha256(raw).hexdigest()


def build_cache_key(
    url: str,
    query: Optional[Any] = None,
    body: Optional[Any] = None,
) -> str:
    """Build the canonical cache key for a request.

    Args:
        url: Request URL, possibly already carrying a query string.
        query: Extra query parameters (anything :class:`httpx.QueryParams`
            accepts) merged with the URL's own.
        body: Request body for read-like POSTs; when given, its digest is
            added as a ``POST=<digest>`` query item.

    Returns:
        The canonical key string.

    Example::

        >>> build_cache_key("https://api.example.com/users?b=2", {"a": 1})
        'https://api.example.com/users?a=1&b=2'
    """
    parsed = httpx.URL(url)
    items = list(parsed.params.multi_items())
    if query:
        items.extend(httpx.QueryParams(query).multi_items())
    if body is not None:
        items.append((BODY_PARAM, body_digest(body)))
    items.sort()
    if parsed.is_absolute_url and parsed.path == "/":
        # an origin with no path names the same resource as "origin/"
        return str(parsed.copy_with(path="/", params=items, fragment=None))
    return str(parsed.copy_with(params=items, fragment=None))
