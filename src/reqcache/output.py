"""Command-line output with strict stdout/stderr discipline.

* **stdout** -- primary data only (summaries, event tables, key lists, JSON).
* **stderr** -- diagnostics (status, errors, debug).
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb`` and the
  ``--no-color`` flag.

:class:`OutputManager` holds the preferences and knows how to render the
objects the commands deal in: log summaries, event lists, snapshot keys
and stats. The module-level functions delegate to a global instance
installed by :func:`~reqcache.app.main_callback`. The library itself never
prints; only the command line does.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from rich.console import Console
from rich.json import JSON
from rich.table import Table

from reqcache.models import LogEvent, LogSummary


class OutputFormat(str, Enum):
    """Supported output formats.

    ``AUTO`` resolves to ``RICH`` on an interactive TTY with colour
    enabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


EVENT_HEADERS = ["Timestamp", "Category", "Verb", "URL", "Elapsed", "Status", "Message"]


def _seconds(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.4f}"


def event_row(event: LogEvent) -> list[str]:
    """Flatten a log event into the cells of one event table row."""
    return [
        event.timestamp.isoformat(),
        event.category.value,
        event.verb or "",
        event.url or "",
        _seconds(event.elapsed),
        "" if event.status_code is None else str(event.status_code),
        event.message,
    ]


def summary_rows(summary: LogSummary) -> list[list[str]]:
    """Cache activity and timing figures of *summary* as (metric, value) rows."""
    timing = summary.timing
    return [
        ["cache hits", str(summary.hits)],
        ["cache sets", str(summary.sets)],
        ["cache drops", str(summary.drops)],
        ["messages", str(summary.messages)],
        ["errors", str(summary.errors)],
        ["timed requests", str(timing.count)],
        ["min elapsed (s)", _seconds(timing.min) or "-"],
        ["mean elapsed (s)", _seconds(timing.mean) or "-"],
        ["max elapsed (s)", _seconds(timing.max) or "-"],
    ]


class OutputManager:
    """Routes command output to stdout (data) or stderr (diagnostics).

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Show debug messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Render a mapping, list or scalar to stdout in the active format.

        Plain mode writes ``key<TAB>value`` lines for mappings (nested
        values as compact JSON) and one line per item for lists.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.RICH:
            self._stdout.print(JSON(json.dumps(data, ensure_ascii=False, default=str)))
        elif isinstance(data, dict):
            for key, value in data.items():
                if isinstance(value, (dict, list)):
                    value = json.dumps(value, default=str)
                self.print_data(f"{key}\t{value}")
        elif isinstance(data, list):
            for item in data:
                self.print_data(str(item))
        else:
            self.print_data(str(data))

    def print_table(
        self,
        headers: Sequence[str],
        rows: Iterable[Sequence[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print tabular data to stdout in the active format.

        JSON mode emits an array of objects keyed by header, plain mode
        tab-separated lines with a header line, rich mode a styled table.
        """
        rows = [list(row) for row in rows]
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for line in [list(headers), *rows]:
                self.print_data("\t".join(line))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header, overflow="fold")
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    def print_summary(self, summary: LogSummary) -> None:
        """Render a log summary: the whole model in JSON mode, two tables otherwise."""
        if self._format == OutputFormat.JSON:
            self.format_response(summary.model_dump(mode="json"))
            return
        self.print_table(
            ["Verb", "Requests"],
            [[verb, str(count)] for verb, count in sorted(summary.counts.items())],
            title="Requests by verb",
        )
        self.print_table(["Metric", "Value"], summary_rows(summary), title="Cache activity")

    def print_events(self, events: Iterable[LogEvent], title: Optional[str] = None) -> None:
        """Render log events as a table, one row per event in log order."""
        self.print_table(EVENT_HEADERS, (event_row(event) for event in events), title=title)

    def print_keys(self, keys: Iterable[str]) -> None:
        """Print cache keys one per line (a JSON array in JSON mode)."""
        keys = sorted(keys)
        if self._format == OutputFormat.JSON:
            self.format_response(keys)
        else:
            for key in keys:
                self.print_data(key)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Informational message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diag(message, message)

    def success(self, message: str) -> None:
        """Green success message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diag(message, f"[green]{message}[/green]")

    def error(self, message: str) -> None:
        """Bold red error. Never suppressed."""
        self._diag(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        """Dimmed debug message, only with ``--verbose``."""
        if self._verbose:
            self._diag(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")

    def _diag(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the global :class:`OutputManager` (used between tests)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_summary(summary: LogSummary) -> None:
    get_output().print_summary(summary)


def print_events(events: Iterable[LogEvent], title: Optional[str] = None) -> None:
    get_output().print_events(events, title)


def print_keys(keys: Iterable[str]) -> None:
    get_output().print_keys(keys)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def debug(message: str) -> None:
    get_output().debug(message)
