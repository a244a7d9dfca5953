"""Invalidation directives and the per-verb default policy.

A directive decides which stored keys a write makes stale. Each directive
is a small immutable matcher exposing ``matches(key)``; :func:`invalidate`
hands that predicate to :meth:`~reqcache.cache.store.CacheStore.drop_matching`.

=========  ====================  ==========================================
Verb       Default directive     Effect
=========  ====================  ==========================================
GET        :class:`DropNothing`  read-only
POST       :class:`DropExact`    only the collection URL itself is stale
PUT        :class:`DropPrefix`   the resource and everything below it
PATCH      :class:`DropPrefix`   same blast radius as PUT
DELETE     :class:`DropPrefix`   the resource and everything below it
=========  ====================  ==========================================

``cached_post`` never invalidates; it stores its response like a GET.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from reqcache.exceptions import InvalidPatternError, InvalidUsageError

if TYPE_CHECKING:
    from reqcache.cache.store import CacheStore

SEPARATOR = "/"


@dataclass(frozen=True)
class DropNothing:
    """Directive that never matches; used to skip invalidation."""

    def matches(self, key: str) -> bool:
        return False


@dataclass(frozen=True)
class DropExact:
    """Directive matching exactly one key."""

    url: str

    def matches(self, key: str) -> bool:
        return key == self.url


@dataclass(frozen=True)
class DropPrefix:
    """Directive matching a resource and everything hierarchically below it.

    A key matches when it equals ``url``, when it starts with ``url``
    followed by exactly one ``/`` (added only if ``url`` does not already
    end with one), or when it is ``url`` with a query string. Thus
    ``projects`` covers ``projects/x`` and ``projects?page=2`` but never
    the sibling ``projects_archive``.
    """

    url: str

    @property
    def base(self) -> str:
        """The URL with exactly one trailing separator."""
        return self.url if self.url.endswith(SEPARATOR) else self.url + SEPARATOR

    def matches(self, key: str) -> bool:
        return (
            key == self.url
            or key.startswith(self.base)
            or key.startswith(self.url + "?")
        )


@dataclass(frozen=True)
class DropPattern:
    """Directive matching keys by regular expression.

    The pattern is searched anywhere in the raw key (no implicit
    anchoring). It is compiled on construction.

    Raises:
        InvalidPatternError: If *pattern* is not a valid regular expression.
    """

    pattern: str
    _compiled: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern)
        except re.error as exc:
            raise InvalidPatternError(f"Invalid pattern {self.pattern!r}: {exc}") from exc
        object.__setattr__(self, "_compiled", compiled)

    def matches(self, key: str) -> bool:
        return self._compiled.search(key) is not None


Directive = Union[DropNothing, DropExact, DropPrefix, DropPattern]

WRITE_VERBS = ("POST", "PUT", "PATCH", "DELETE")


def default_directive(verb: str, url: str) -> Directive:
    """Return the directive applied after *verb* on *url* when the caller gives none.

    Raises:
        InvalidUsageError: For verbs outside GET/POST/PUT/PATCH/DELETE.
    """
    verb = verb.upper()
    if verb == "GET":
        return DropNothing()
    if verb == "POST":
        return DropExact(url)
    if verb in ("PUT", "PATCH", "DELETE"):
        return DropPrefix(url)
    raise InvalidUsageError(f"Unsupported HTTP verb: {verb}")


def invalidate(store: CacheStore, directive: Directive) -> list[str]:
    """Drop every key of *store* matched by *directive*.

    Returns:
        The removed keys, sorted.
    """
    if isinstance(directive, DropNothing):
        return []
    if isinstance(directive, DropExact):
        return [directive.url] if store.drop_exact(directive.url) else []
    return store.drop_matching(directive.matches)
