"""In-memory response store keyed by canonical request URL.

:class:`CacheStore` is the primitive layer of the cache: it knows nothing
about HTTP verbs or invalidation policy, only how to get, set and drop
entries. Entries never expire; they live until dropped or until the store
is cleared.

Every operation takes the store's re-entrant lock, so a single store can
be shared by several threads without lost updates, and
:meth:`CacheStore.snapshot` / :meth:`CacheStore.replace` never observe or
produce a half-updated mapping.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Iterator, Mapping, Optional


class CacheStore:
    """Thread-safe mapping from cache key to cached response.

    Values are opaque to the store. They should be treated as immutable
    snapshots of the response that produced them.

    Example::

        store = CacheStore()
        store.set("https://api.example.com/users", response)
        store.get("https://api.example.com/users")
        store.drop_matching(lambda key: key.endswith("/users"))
    """

    def __init__(self, entries: Optional[Mapping[str, Any]] = None) -> None:
        self._lock = threading.RLock()
        self._entries: dict[str, Any] = dict(entries or {})

    def get(self, key: str, default: Any = None) -> Any:
        """Return the entry stored under *key*, or *default* on a miss.

        A stored ``None`` is a real entry; pass a sentinel as *default* to
        tell it apart from a miss.
        """
        with self._lock:
            return self._entries.get(key, default)

    def set(self, key: str, entry: Any) -> None:
        """Insert or overwrite the entry stored under *key*."""
        with self._lock:
            self._entries[key] = entry

    def drop_exact(self, key: str) -> bool:
        """Remove the entry for exactly *key*.

        Returns:
            ``True`` if an entry was removed, ``False`` if *key* was absent.
        """
        with self._lock:
            return self._entries.pop(key, _MISSING) is not _MISSING

    def drop_all(self) -> list[str]:
        """Remove every entry and return the removed keys, sorted."""
        with self._lock:
            removed = sorted(self._entries)
            self._entries.clear()
            return removed

    def drop_matching(self, predicate: Callable[[str], bool]) -> list[str]:
        """Remove every entry whose key satisfies *predicate*.

        The predicate is evaluated for all keys before anything is removed,
        so a predicate that raises leaves the store untouched.

        Returns:
            The removed keys, sorted.
        """
        with self._lock:
            doomed = sorted(key for key in self._entries if predicate(key))
            for key in doomed:
                del self._entries[key]
            return doomed

    def keys(self) -> list[str]:
        """Return the stored keys, sorted."""
        with self._lock:
            return sorted(self._entries)

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of all entries taken under the lock."""
        with self._lock:
            return dict(self._entries)

    def replace(self, entries: Mapping[str, Any]) -> None:
        """Swap the whole content of the store for *entries* in one step."""
        fresh = dict(entries)
        with self._lock:
            self._entries = fresh

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())


_MISSING = object()
