"""HTTP-facing half of reqcache.

Classes:
    :class:`Transport` -- the narrow protocol the cache uses to reach the
    network.
    :class:`HttpxTransport` -- default transport backed by :class:`httpx.Client`.
    :class:`Session` -- verb-aware dispatcher combining a transport, a
    cache store and an event log.

Example::

    from reqcache.client import HttpxTransport, Session

    with Session(HttpxTransport()) as session:
        resp = session.get("https://api.example.com/users")
"""

from reqcache.client.session import Session
from reqcache.client.transport import HttpxTransport, Transport

__all__ = ["HttpxTransport", "Session", "Transport"]
