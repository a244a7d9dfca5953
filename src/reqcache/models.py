"""Canonical Pydantic models shared across all reqcache modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CacheConfig`, :class:`LogConfig`, :class:`RequestConfig`, and
    :class:`GlobalConfig`.

**Event log models** -- written by :class:`~reqcache.logs.logger.EventLog`,
read back by :mod:`reqcache.logs.reader` and aggregated by
:mod:`reqcache.logs.summary`:
    :class:`LogCategory`, :class:`LogEvent`, :class:`TimingSummary`, and
    :class:`LogSummary`.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class CacheConfig(BaseModel):
    """Response cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Serve GET requests from the cache")
    snapshot_path: Optional[str] = Field(
        default=None,
        description="Default location for save_cache/load_cache "
        "(falls back to <cache_dir>/snapshot)",
    )


class LogConfig(BaseModel):
    """Event log settings stored in :class:`GlobalConfig`."""

    path: Optional[str] = Field(
        default=None,
        description="Bind the event log to this file when a session is created; "
        "'-' means stdout, unset means no logging",
    )


class RequestConfig(BaseModel):
    """Default HTTP settings for the bundled httpx transport."""

    base_url: Optional[str] = Field(
        default=None, description="Prefix prepended to every request URL"
    )
    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=3, description="Max retry attempts")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/reqcache/config.json``.

    Loaded and saved by :func:`~reqcache.config.load_global_config` and
    :func:`~reqcache.config.save_global_config`. See
    :func:`~reqcache.config.resolve_config` for the full precedence chain.
    """

    cache: CacheConfig = Field(default_factory=CacheConfig)
    log: LogConfig = Field(default_factory=LogConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Event log ---


class LogCategory(str, enum.Enum):
    """Kind of a :class:`LogEvent`."""

    HTTP = "HTTP"
    CACHE_SET = "CACHE SET"
    CACHE_HIT = "CACHE HIT"
    CACHE_DROP = "CACHE DROP"
    MESSAGE = "MESSAGE"
    ERROR = "ERROR"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LogEvent(BaseModel):
    """A single immutable entry of the event log.

    Only ``category`` is required. ``verb`` and ``url`` are set for HTTP and
    CACHE events, ``elapsed`` (seconds) and ``status_code`` only for HTTP
    events, and ``message`` for MESSAGE and ERROR events.

    Example::

        LogEvent(category=LogCategory.HTTP, verb="GET",
                 url="https://api.example.com/users", elapsed=0.042,
                 status_code=200)
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow)
    category: LogCategory
    verb: Optional[str] = None
    url: Optional[str] = None
    elapsed: Optional[float] = None
    status_code: Optional[int] = None
    message: str = ""


class TimingSummary(BaseModel):
    """Elapsed-time statistics over the timed events of a log.

    When no event carries an elapsed time, ``count`` is 0 and the
    statistics are ``None``.
    """

    count: int = 0
    min: Optional[float] = None
    mean: Optional[float] = None
    max: Optional[float] = None


class LogSummary(BaseModel):
    """Aggregate view of an event log produced by
    :func:`~reqcache.logs.summary.request_log_summary`.
    """

    counts: dict[str, int] = Field(
        default_factory=dict,
        description="Requests per HTTP verb (HTTP events plus cache hits)",
    )
    hits: int = 0
    sets: int = 0
    drops: int = 0
    messages: int = 0
    errors: int = 0
    timing: TimingSummary = Field(default_factory=TimingSummary)
