"""Persisted cache snapshots backed by :mod:`diskcache`.

A snapshot is a :class:`diskcache.Cache` directory holding one record per
cache entry plus a manifest record (format version and entry count).
Entries are pickled by diskcache, so any picklable response object, such
as a fully read :class:`httpx.Response`, round-trips exactly.

Writes go to a staging directory beside the target and are renamed into
place once complete, so an interrupted save never replaces a good
snapshot with a partial one. Reads load the whole snapshot into memory
and validate it before returning anything, so callers can swap the result
into a live store all at once.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Mapping

import diskcache

from reqcache.exceptions import SnapshotError

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
_MANIFEST_KEY = ("reqcache", "manifest")
_DB_FILENAME = "cache.db"
_MISSING = object()


def _open(directory: Path) -> diskcache.Cache:
    # Snapshots must never cull entries, whatever their total size.
    return diskcache.Cache(str(directory), eviction_policy="none")


def _remove(path: Path) -> None:
    if path.is_dir():
        shutil.rmtree(path, ignore_errors=True)
    elif path.exists():
        path.unlink()


def save_snapshot(entries: Mapping[str, Any], path: str | Path) -> Path:
    """Write *entries* as a snapshot directory at *path*.

    An existing snapshot at *path* is replaced only after the new one has
    been fully written.

    Args:
        entries: Mapping of cache key to cached response.
        path: Target directory.

    Returns:
        The resolved snapshot path.

    Raises:
        SnapshotError: If an entry cannot be pickled or the directory
            cannot be written.
    """
    target = Path(path).expanduser()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(
            tempfile.mkdtemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        )
    except OSError as exc:
        raise SnapshotError(f"Cannot write cache snapshot to {target}: {exc}") from exc

    try:
        with _open(staging) as cache:
            for key, value in entries.items():
                cache.set(key, value)
            cache.set(_MANIFEST_KEY, {"version": FORMAT_VERSION, "count": len(entries)})
        _swap_into_place(staging, target)
    except SnapshotError:
        _remove(staging)
        raise
    except Exception as exc:
        _remove(staging)
        raise SnapshotError(f"Cannot write cache snapshot to {target}: {exc}") from exc

    logger.debug("Saved %d cache entries to %s", len(entries), target)
    return target


def _swap_into_place(staging: Path, target: Path) -> None:
    """Rename *staging* to *target*, moving any previous snapshot out of the way first."""
    if not target.exists():
        os.replace(staging, target)
        return
    backup = Path(tempfile.mkdtemp(dir=target.parent, prefix=f".{target.name}.", suffix=".old"))
    backup.rmdir()
    os.replace(target, backup)
    try:
        os.replace(staging, target)
    except OSError:
        os.replace(backup, target)
        raise
    _remove(backup)


def load_snapshot(path: str | Path) -> dict[str, Any]:
    """Read a snapshot written by :func:`save_snapshot`.

    Args:
        path: Snapshot directory.

    Returns:
        A new ``dict`` mapping cache keys to cached responses.

    Raises:
        SnapshotError: If *path* is missing, is not a snapshot, or holds
            corrupt data.
    """
    source = Path(path).expanduser()
    if not (source / _DB_FILENAME).is_file():
        raise SnapshotError(f"No cache snapshot at {source}")

    try:
        with _open(source) as cache:
            manifest = cache.get(_MANIFEST_KEY)
            if not isinstance(manifest, dict) or manifest.get("version") != FORMAT_VERSION:
                raise SnapshotError(f"Unrecognised cache snapshot at {source}")
            entries: dict[str, Any] = {}
            for key in cache.iterkeys():
                if key == _MANIFEST_KEY:
                    continue
                value = cache.get(key, default=_MISSING)
                if value is _MISSING:
                    raise SnapshotError(f"Cache snapshot at {source} lost entry {key!r}")
                entries[key] = value
    except SnapshotError:
        raise
    except Exception as exc:
        raise SnapshotError(f"Corrupt cache snapshot at {source}: {exc}") from exc

    if len(entries) != manifest.get("count"):
        raise SnapshotError(
            f"Cache snapshot at {source} is incomplete: "
            f"expected {manifest.get('count')} entries, found {len(entries)}"
        )
    logger.debug("Loaded %d cache entries from %s", len(entries), source)
    return entries
