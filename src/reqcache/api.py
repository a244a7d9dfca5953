"""Module-level functions bound to a default :class:`~reqcache.client.session.Session`.

Scripts that only ever talk to one API can use the cache without passing
a session around::

    import reqcache

    reqcache.start_log("requests.log")
    projects = reqcache.get("https://api.example.com/projects/")
    reqcache.put("https://api.example.com/projects/42/", {"name": "renamed"})

The default session is created lazily from
:func:`~reqcache.config.resolve_config` on first use. Install a specific
one with :func:`set_session`, or drop it with :func:`reset_session`
(mostly useful in tests).
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, ContextManager, Optional

from reqcache.cache.invalidation import Directive
from reqcache.client.session import Session
from reqcache.logs.logger import Sink
from reqcache.models import LogEvent

_session: Optional[Session] = None
_session_lock = threading.Lock()


def get_session() -> Session:
    """Return the default session, creating it from the resolved config if needed."""
    global _session
    with _session_lock:
        if _session is None:
            from reqcache.config import resolve_config

            _session = Session.from_config(resolve_config())
        return _session


def set_session(session: Session) -> None:
    """Install *session* as the default session."""
    global _session
    with _session_lock:
        _session = session


def reset_session() -> None:
    """Close and forget the default session."""
    global _session
    with _session_lock:
        if _session is not None:
            _session.close()
        _session = None


# ------------------------------------------------------------------ #
# Verbs
# ------------------------------------------------------------------ #


def get(url: str, query: Optional[Any] = None, **kwargs: Any) -> Any:
    """``GET`` through the default session's cache."""
    return get_session().get(url, query=query, **kwargs)


def cached_post(url: str, body: Any = None, query: Optional[Any] = None, **kwargs: Any) -> Any:
    """Read-like ``POST`` whose response is cached."""
    return get_session().cached_post(url, body, query=query, **kwargs)


def post(
    url: str,
    body: Any = None,
    query: Optional[Any] = None,
    drop: Optional[Directive] = None,
    **kwargs: Any,
) -> Any:
    """``POST``, dropping the cached *url* unless *drop* says otherwise."""
    return get_session().post(url, body, query=query, drop=drop, **kwargs)


def put(
    url: str,
    body: Any = None,
    query: Optional[Any] = None,
    drop: Optional[Directive] = None,
    **kwargs: Any,
) -> Any:
    """``PUT``, dropping *url* and everything below it unless *drop* says otherwise."""
    return get_session().put(url, body, query=query, drop=drop, **kwargs)


def patch(
    url: str,
    body: Any = None,
    query: Optional[Any] = None,
    drop: Optional[Directive] = None,
    **kwargs: Any,
) -> Any:
    """``PATCH``, dropping *url* and everything below it unless *drop* says otherwise."""
    return get_session().patch(url, body, query=query, drop=drop, **kwargs)


def delete(
    url: str,
    query: Optional[Any] = None,
    drop: Optional[Directive] = None,
    **kwargs: Any,
) -> Any:
    """``DELETE``, dropping *url* and everything below it unless *drop* says otherwise."""
    return get_session().delete(url, query=query, drop=drop, **kwargs)


# ------------------------------------------------------------------ #
# Invalidation
# ------------------------------------------------------------------ #


def clear_cache() -> list[str]:
    return get_session().clear_cache()


def drop_only(url: str, query: Optional[Any] = None) -> list[str]:
    return get_session().drop_only(url, query=query)


def drop_cache(url: str) -> list[str]:
    return get_session().drop_cache(url)


def drop_pattern(pattern: str) -> list[str]:
    return get_session().drop_pattern(pattern)


# ------------------------------------------------------------------ #
# Logging
# ------------------------------------------------------------------ #


def start_log(sink: Sink = None) -> None:
    get_session().start_log(sink)


def stop_log() -> None:
    get_session().stop_log()


def log_message(message: str) -> LogEvent:
    return get_session().log_message(message)


def halt(message: str) -> None:
    """Log an ``ERROR`` event if logging is on, then raise :class:`~reqcache.exceptions.HaltError`."""
    get_session().halt(message)


# ------------------------------------------------------------------ #
# Persistence, switches, direct access
# ------------------------------------------------------------------ #


def save_cache(path: Optional[str | Path] = None) -> Path:
    return get_session().save_cache(path)


def load_cache(path: Optional[str | Path] = None) -> int:
    return get_session().load_cache(path)


def cache_on() -> None:
    get_session().cache_on()


def cache_off() -> None:
    get_session().cache_off()


def uncached() -> ContextManager[Session]:
    """Context manager bypassing the default session's cache for reads."""
    return get_session().uncached()


def cache_keys() -> list[str]:
    return get_session().cache_keys()


def get_cache(key: str) -> Optional[Any]:
    return get_session().get_cache(key)


def set_cache(key: str, value: Any) -> None:
    get_session().set_cache(key, value)


def has_cache(url: str, query: Optional[Any] = None) -> bool:
    return get_session().has_cache(url, query=query)
