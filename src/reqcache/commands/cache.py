"""Cache commands -- inspect saved cache snapshots.

Provides the ``reqcache cache`` sub-command group. Snapshots are the
directories written by :meth:`~reqcache.client.session.Session.save_cache`;
when no path is given, the configured default location is used.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from reqcache.cache import load_snapshot
from reqcache.exceptions import ReqcacheError
from reqcache.output import debug, error, format_response, info, print_keys


cache_app = typer.Typer(no_args_is_help=True)


def _load(path: Optional[Path]) -> tuple[Path, dict]:
    from reqcache.config import default_snapshot_path, resolve_config

    try:
        target = path if path is not None else default_snapshot_path(resolve_config())
        entries = load_snapshot(target)
        debug(f"Loaded {len(entries)} entries from {target}")
        return target, entries
    except ReqcacheError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@cache_app.command("keys")
def cache_keys(
    path: Optional[Path] = typer.Argument(None, help="Snapshot directory."),
) -> None:
    """Print the cache keys held by a snapshot, one per line.

    Example::

        reqcache cache keys ~/.cache/reqcache/snapshot
    """
    target, entries = _load(path)
    info(f"Snapshot: {target}")
    print_keys(entries)


@cache_app.command("stats")
def cache_stats(
    path: Optional[Path] = typer.Argument(None, help="Snapshot directory."),
) -> None:
    """Show the location, entry count, and value types of a snapshot."""
    target, entries = _load(path)
    types: dict[str, int] = {}
    for value in entries.values():
        name = type(value).__name__
        types[name] = types.get(name, 0) + 1
    format_response({"path": str(target), "size": len(entries), "types": types})
