"""Verb-aware request dispatcher with a response cache and event log.

:class:`Session` is the context object tying the pieces together: a
:class:`~reqcache.client.transport.Transport`, a
:class:`~reqcache.cache.store.CacheStore` and an
:class:`~reqcache.logs.logger.EventLog`.

- **Reads** (``get``) consult the store first. A hit is returned without
  touching the transport; a miss goes to the transport and the response
  is stored.
- **Read-like POSTs** (``cached_post``) always hit the transport and store
  the response under a key that includes a digest of the body.
- **Writes** (``post``, ``put``, ``patch``, ``delete``) hit the transport
  and then apply an invalidation directive, either the caller's ``drop``
  or the verb default from
  :func:`~reqcache.cache.invalidation.default_directive`.

Transport errors propagate unchanged and leave the store as it was.
After a successful call the store is updated first and the events are
written afterwards, the ``HTTP`` event always before any ``CACHE`` event.

See Also:
    :mod:`reqcache.api` for module-level functions bound to a default
    session.
"""

from __future__ import annotations

import contextlib
import logging
import time
from pathlib import Path
from typing import Any, Iterator, Optional

from reqcache.cache.invalidation import (
    Directive,
    DropExact,
    DropPattern,
    DropPrefix,
    default_directive,
    invalidate,
)
from reqcache.cache.keys import build_cache_key
from reqcache.cache.snapshot import load_snapshot, save_snapshot
from reqcache.cache.store import CacheStore
from reqcache.client.transport import HttpxTransport, Transport
from reqcache.exceptions import HaltError
from reqcache.logs.logger import EventLog, Sink
from reqcache.models import GlobalConfig, LogCategory, LogEvent

logger = logging.getLogger(__name__)

_MISS = object()


class Session:
    """Cache-aware HTTP session.

    Args:
        transport: Object performing the actual requests.
        store: Cache store to use; a fresh empty one by default.
        log: Event log to write to; a fresh unbound one by default.
        base_url: Prefix prepended to every request URL.
        cache_enabled: When ``False``, reads bypass the store entirely.
        snapshot_path: Default location for :meth:`save_cache` and
            :meth:`load_cache`.

    Example::

        with Session.from_config(resolve_config()) as session:
            session.start_log("requests.log")
            users = session.get("https://api.example.com/users")
            session.post("https://api.example.com/users", {"name": "ada"})
            # the POST dropped the cached /users listing
    """

    def __init__(
        self,
        transport: Transport,
        store: Optional[CacheStore] = None,
        log: Optional[EventLog] = None,
        base_url: Optional[str] = None,
        cache_enabled: bool = True,
        snapshot_path: Optional[str | Path] = None,
    ) -> None:
        self._transport = transport
        self._store = store if store is not None else CacheStore()
        self._log = log if log is not None else EventLog()
        self._base_url = base_url or ""
        self._cache_enabled = cache_enabled
        self._snapshot_path = Path(snapshot_path) if snapshot_path else None
        self._owns_transport = False

    @classmethod
    def from_config(cls, config: Optional[GlobalConfig] = None) -> Session:
        """Build a session with an :class:`HttpxTransport` from *config*.

        Starts logging right away when ``config.log.path`` is set.
        """
        config = config or GlobalConfig()
        session = cls(
            transport=HttpxTransport(config.request),
            base_url=config.request.base_url,
            cache_enabled=config.cache.enabled,
            snapshot_path=config.cache.snapshot_path,
        )
        session._owns_transport = True
        if config.log.path:
            session.start_log(config.log.path)
        return session

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Unbind the log and close the transport if the session created it."""
        self._log.stop()
        if self._owns_transport:
            close = getattr(self._transport, "close", None)
            if close is not None:
                close()

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def log(self) -> EventLog:
        return self._log

    @property
    def cache_enabled(self) -> bool:
        return self._cache_enabled

    # ------------------------------------------------------------------ #
    # Verbs
    # ------------------------------------------------------------------ #

    def get(self, url: str, query: Optional[Any] = None, **kwargs: Any) -> Any:
        """Return the response for ``GET url``, from the cache when possible.

        Args:
            url: Request URL (prefixed with ``base_url`` if one is set).
            query: Query parameters; part of the cache key.
            **kwargs: Forwarded to the transport untouched.

        Note:
            The lookup and the store are separate locked steps. When another
            thread invalidates *url* while this GET is in flight, the
            response fetched before that write is still stored afterwards.
            Callers mixing concurrent reads and writes of one resource
            should serialise them or drop the key again after the write.
        """
        full_url = self._resolve(url)
        key = build_cache_key(full_url, query)

        if self._cache_enabled:
            cached = self._store.get(key, _MISS)
            if cached is not _MISS:
                self._log.emit(LogCategory.CACHE_HIT, verb="GET", url=key)
                return cached

        response, elapsed = self._send("GET", full_url, None, query, kwargs)
        if self._cache_enabled:
            self._store.set(key, response)
        self._log_http("GET", full_url, response, elapsed)
        if self._cache_enabled:
            self._log.emit(LogCategory.CACHE_SET, verb="GET", url=key)
        return response

    def cached_post(
        self,
        url: str,
        body: Any = None,
        query: Optional[Any] = None,
        **kwargs: Any,
    ) -> Any:
        """Send a read-like POST and cache its response instead of invalidating.

        The transport is always called. The response is stored under a key
        that includes a digest of *body*, so it can later be inspected with
        :meth:`get_cache` or dropped like any other entry.
        """
        full_url = self._resolve(url)
        key = build_cache_key(full_url, query, body=body if body is not None else b"")

        response, elapsed = self._send("POST", full_url, body, query, kwargs)
        if self._cache_enabled:
            self._store.set(key, response)
        self._log_http("POST", full_url, response, elapsed)
        if self._cache_enabled:
            self._log.emit(LogCategory.CACHE_SET, verb="POST", url=key)
        return response

    def post(
        self,
        url: str,
        body: Any = None,
        query: Optional[Any] = None,
        drop: Optional[Directive] = None,
        **kwargs: Any,
    ) -> Any:
        """Send a POST; by default drops only the cached entry for *url* itself.

        Args:
            drop: Directive to apply instead of the default; pass
                :class:`~reqcache.cache.invalidation.DropNothing` to keep
                the cache as it is.
        """
        return self.request("POST", url, body, query=query, drop=drop, **kwargs)

    def put(
        self,
        url: str,
        body: Any = None,
        query: Optional[Any] = None,
        drop: Optional[Directive] = None,
        **kwargs: Any,
    ) -> Any:
        """Send a PUT; by default drops *url* and everything below it."""
        return self.request("PUT", url, body, query=query, drop=drop, **kwargs)

    def patch(
        self,
        url: str,
        body: Any = None,
        query: Optional[Any] = None,
        drop: Optional[Directive] = None,
        **kwargs: Any,
    ) -> Any:
        """Send a PATCH; by default drops *url* and everything below it."""
        return self.request("PATCH", url, body, query=query, drop=drop, **kwargs)

    def delete(
        self,
        url: str,
        query: Optional[Any] = None,
        drop: Optional[Directive] = None,
        **kwargs: Any,
    ) -> Any:
        """Send a DELETE; by default drops *url* and everything below it."""
        return self.request("DELETE", url, None, query=query, drop=drop, **kwargs)

    def request(
        self,
        method: str,
        url: str,
        body: Any = None,
        query: Optional[Any] = None,
        drop: Optional[Directive] = None,
        **kwargs: Any,
    ) -> Any:
        """Send a state-changing request and invalidate what it made stale.

        Invalidation only happens once the transport has returned; a
        transport error propagates with the cache untouched. The store is
        updated before any event is written, so a failing log sink cannot
        leave stale entries behind a write the server accepted.

        Raises:
            InvalidUsageError: If *method* is not a supported verb; raised
                before anything is sent.
            LogWriteError: If the bound sink fails; the cache has already
                been invalidated by then.
        """
        method = method.upper()
        full_url = self._resolve(url)
        key = build_cache_key(full_url, query)
        default = default_directive(method, key)
        directive = drop if drop is not None else default

        response, elapsed = self._send(method, full_url, body, query, kwargs)
        dropped = invalidate(self._store, directive)
        self._log_http(method, full_url, response, elapsed)
        self._log_drops(dropped, verb=method)
        return response

    # ------------------------------------------------------------------ #
    # Invalidation
    # ------------------------------------------------------------------ #

    def clear_cache(self) -> list[str]:
        """Drop every cached entry. Returns the removed keys."""
        dropped = self._store.drop_all()
        self._log_drops(dropped, verb=None)
        return dropped

    def drop_only(self, url: str, query: Optional[Any] = None) -> list[str]:
        """Drop the entry for exactly *url*. Returns the removed keys."""
        return self._apply(DropExact(build_cache_key(self._resolve(url), query)))

    def drop_cache(self, url: str) -> list[str]:
        """Drop *url* and every entry hierarchically below it. Returns the removed keys."""
        return self._apply(DropPrefix(build_cache_key(self._resolve(url))))

    def drop_pattern(self, pattern: str) -> list[str]:
        """Drop every entry whose key matches the regular expression *pattern*.

        Raises:
            InvalidPatternError: If *pattern* does not compile; nothing is
                dropped in that case.
        """
        return self._apply(DropPattern(pattern))

    def invalidate(self, directive: Directive) -> list[str]:
        """Apply an arbitrary directive. Returns the removed keys."""
        return self._apply(directive)

    # ------------------------------------------------------------------ #
    # Logging
    # ------------------------------------------------------------------ #

    def start_log(self, sink: Sink = None) -> None:
        """Bind the event log to *sink* (stdout when ``None``)."""
        self._log.start(sink)

    def stop_log(self) -> None:
        """Unbind the event log."""
        self._log.stop()

    def log_message(self, message: str) -> LogEvent:
        """Write a ``MESSAGE`` event with free text."""
        return self._log.emit(LogCategory.MESSAGE, message=message)

    def halt(self, message: str) -> None:
        """Log an ``ERROR`` event (when a sink is bound) and raise :class:`HaltError`."""
        event = None
        if self._log.active:
            event = self._log.emit(LogCategory.ERROR, message=message)
        raise HaltError(message, event=event)

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #

    def save_cache(self, path: Optional[str | Path] = None) -> Path:
        """Write the whole cache to a snapshot at *path*.

        Returns:
            The snapshot location actually written.
        """
        target = self._snapshot_target(path)
        return save_snapshot(self._store.snapshot(), target)

    def load_cache(self, path: Optional[str | Path] = None) -> int:
        """Replace the cache with the snapshot at *path*.

        The current entries are kept if the snapshot cannot be read.

        Returns:
            The number of entries loaded.

        Raises:
            SnapshotError: If the snapshot is missing or corrupt.
        """
        entries = load_snapshot(self._snapshot_target(path))
        self._store.replace(entries)
        return len(entries)

    # ------------------------------------------------------------------ #
    # Switches and direct access
    # ------------------------------------------------------------------ #

    def cache_on(self) -> None:
        """Serve reads from the cache again."""
        self._cache_enabled = True

    def cache_off(self) -> None:
        """Stop caching reads and clear everything cached so far."""
        self._cache_enabled = False
        self.clear_cache()

    @contextlib.contextmanager
    def uncached(self) -> Iterator[Session]:
        """Bypass the cache for reads inside the block.

        Cached entries are neither read nor written while the block runs,
        but writes still invalidate. The previous setting is restored on
        exit.
        """
        previous = self._cache_enabled
        self._cache_enabled = False
        try:
            yield self
        finally:
            self._cache_enabled = previous

    def cache_keys(self) -> list[str]:
        """Return every cached key, sorted."""
        return self._store.keys()

    def get_cache(self, key: str) -> Optional[Any]:
        """Return the entry stored under the raw *key*, or ``None``."""
        return self._store.get(key)

    def set_cache(self, key: str, value: Any) -> None:
        """Store *value* under the raw *key*."""
        self._store.set(key, value)

    def has_cache(self, url: str, query: Optional[Any] = None) -> bool:
        """Whether a GET of *url* would be answered from the cache."""
        return build_cache_key(self._resolve(url), query) in self._store

    def cache_stats(self) -> dict[str, Any]:
        """Return the cache switch, entry count, and log binding."""
        return {
            "enabled": self._cache_enabled,
            "size": len(self._store),
            "logging": self._log.sink_name or None,
        }

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _resolve(self, url: str) -> str:
        return f"{self._base_url}{url}" if self._base_url else url

    def _snapshot_target(self, path: Optional[str | Path]) -> Path:
        if path is not None:
            return Path(path)
        if self._snapshot_path is not None:
            return self._snapshot_path
        from reqcache.config import default_snapshot_path

        return default_snapshot_path()

    def _send(
        self,
        method: str,
        url: str,
        body: Any,
        query: Optional[Any],
        kwargs: dict[str, Any],
    ) -> tuple[Any, float]:
        """Call the transport and return its response with the elapsed time."""
        if query:
            kwargs = {**kwargs, "params": query}
        started = time.perf_counter()
        response = self._transport.request(method, url, body, **kwargs)
        return response, time.perf_counter() - started

    def _log_http(self, method: str, url: str, response: Any, elapsed: float) -> None:
        status = getattr(response, "status_code", None)
        self._log.emit(
            LogCategory.HTTP,
            verb=method,
            url=url,
            elapsed=elapsed,
            status_code=status if isinstance(status, int) else None,
        )

    def _apply(self, directive: Directive, verb: Optional[str] = None) -> list[str]:
        dropped = invalidate(self._store, directive)
        self._log_drops(dropped, verb=verb)
        return dropped

    def _log_drops(self, keys: list[str], verb: Optional[str]) -> None:
        if keys:
            logger.debug("Dropped %d cache entries", len(keys))
        for key in keys:
            self._log.emit(LogCategory.CACHE_DROP, verb=verb, url=key)
