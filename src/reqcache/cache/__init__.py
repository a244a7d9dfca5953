"""Response cache primitives for reqcache.

This package holds the parts of the cache that know nothing about the
transport:

* :class:`CacheStore` -- thread-safe in-memory key/response mapping.
* :func:`build_cache_key` -- canonical URL keys.
* Invalidation directives (:class:`DropNothing`, :class:`DropExact`,
  :class:`DropPrefix`, :class:`DropPattern`), the per-verb
  :func:`default_directive` policy and :func:`invalidate`.
* :func:`save_snapshot` / :func:`load_snapshot` -- durable snapshots via
  :mod:`diskcache`.

The verb-aware orchestration lives in
:class:`~reqcache.client.session.Session`.
"""

from reqcache.cache.invalidation import (
    Directive,
    DropExact,
    DropNothing,
    DropPattern,
    DropPrefix,
    default_directive,
    invalidate,
)
from reqcache.cache.keys import build_cache_key
from reqcache.cache.snapshot import load_snapshot, save_snapshot
from reqcache.cache.store import CacheStore

__all__ = [
    "CacheStore",
    "Directive",
    "DropExact",
    "DropNothing",
    "DropPattern",
    "DropPrefix",
    "build_cache_key",
    "default_directive",
    "invalidate",
    "load_snapshot",
    "save_snapshot",
]
