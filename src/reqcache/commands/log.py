"""Log commands -- summarise and list recorded event logs.

Provides the ``reqcache log`` sub-command group. Both commands read a log
written by :class:`~reqcache.logs.logger.EventLog` through
:func:`~reqcache.logs.reader.load_log_file`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from reqcache.exceptions import ReqcacheError
from reqcache.logs import load_log_file, request_log_summary
from reqcache.models import LogCategory
from reqcache.output import debug, error, print_events, print_summary


log_app = typer.Typer(no_args_is_help=True)


@log_app.command("summary")
def log_summary(
    path: Path = typer.Argument(help="Log file written by start_log."),
) -> None:
    """Show request counts by verb, cache activity, and timing statistics.

    Example::

        reqcache log summary requests.log
        reqcache --json log summary requests.log
    """
    try:
        summary = request_log_summary(load_log_file(path))
    except ReqcacheError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_summary(summary)


@log_app.command("show")
def log_show(
    path: Path = typer.Argument(help="Log file written by start_log."),
    category: Optional[LogCategory] = typer.Option(
        None, "--category", "-c", help="Only show events of this category."
    ),
) -> None:
    """List the events of a log in order.

    Example::

        reqcache log show requests.log --category "CACHE HIT"
    """
    try:
        events = load_log_file(path)
    except ReqcacheError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    debug(f"Read {len(events)} events from {path}")

    if category is not None:
        events = [event for event in events if event.category == category]

    print_events(events, title=str(path))
