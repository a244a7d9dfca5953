"""reqcache -- client-side HTTP response cache with verb-driven invalidation.

GET responses are cached by canonical URL and served without touching the
network until a write makes them stale: POST drops the collection URL it
was sent to, PUT/PATCH/DELETE drop the resource and everything below it.
Every request, hit, store and drop can be recorded to a structured event
log and summarised afterwards.

Typical use::

    import reqcache

    reqcache.start_log("requests.log")
    reqcache.get("https://api.example.com/projects/")      # HTTP + CACHE SET
    reqcache.get("https://api.example.com/projects/")      # CACHE HIT
    reqcache.post("https://api.example.com/projects/", {"name": "new"})
    summary = reqcache.request_log_summary(reqcache.load_log_file("requests.log"))

Modules:
    api: Module-level functions bound to a default session.
    client: Transport contract, httpx transport, and the Session dispatcher.
    cache: Store, key canonicalisation, invalidation directives, snapshots.
    logs: Event log sink, log reader, and summary.
    config: XDG-aware configuration and precedence resolution.
    app: Typer command line for inspecting logs and snapshots.
"""

__version__ = "0.3.0"

from reqcache.api import (  # noqa: E402
    cache_keys,
    cache_off,
    cache_on,
    cached_post,
    clear_cache,
    delete,
    drop_cache,
    drop_only,
    drop_pattern,
    get,
    get_cache,
    get_session,
    halt,
    has_cache,
    load_cache,
    log_message,
    patch,
    post,
    put,
    reset_session,
    save_cache,
    set_cache,
    set_session,
    start_log,
    stop_log,
    uncached,
)
from reqcache.cache import (  # noqa: E402
    CacheStore,
    DropExact,
    DropNothing,
    DropPattern,
    DropPrefix,
    build_cache_key,
)
from reqcache.client import HttpxTransport, Session, Transport  # noqa: E402
from reqcache.exceptions import HaltError, ReqcacheError  # noqa: E402
from reqcache.logs import (  # noqa: E402
    EventLog,
    load_log_file,
    parse_log_lines,
    request_log_summary,
)
from reqcache.models import LogCategory, LogEvent, LogSummary  # noqa: E402

__all__ = [
    "CacheStore",
    "DropExact",
    "DropNothing",
    "DropPattern",
    "DropPrefix",
    "EventLog",
    "HaltError",
    "HttpxTransport",
    "LogCategory",
    "LogEvent",
    "LogSummary",
    "ReqcacheError",
    "Session",
    "Transport",
    "build_cache_key",
    "cache_keys",
    "cache_off",
    "cache_on",
    "cached_post",
    "clear_cache",
    "delete",
    "drop_cache",
    "drop_only",
    "drop_pattern",
    "get",
    "get_cache",
    "get_session",
    "halt",
    "has_cache",
    "load_cache",
    "load_log_file",
    "log_message",
    "parse_log_lines",
    "patch",
    "post",
    "put",
    "request_log_summary",
    "reset_session",
    "save_cache",
    "set_cache",
    "set_session",
    "start_log",
    "stop_log",
    "uncached",
]
