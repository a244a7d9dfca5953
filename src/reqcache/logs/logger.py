"""Append-only event log with a rebindable sink.

:class:`EventLog` records cache and transport activity as
:class:`~reqcache.models.LogEvent` objects, one JSON document per line, to
whatever sink was bound by :meth:`EventLog.start`. Nothing is written until
a sink is bound. Lines are written and flushed under a lock, so concurrent
callers never interleave partial lines.

A sink that fails (closed file, full disk) raises
:class:`~reqcache.exceptions.LogWriteError` instead of dropping the event.

Every event is also passed to the standard :mod:`logging` logger of this
module at DEBUG level, independent of the bound sink.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from pathlib import Path
from typing import IO, Any, Optional, Union

from reqcache.exceptions import InvalidUsageError, LogWriteError
from reqcache.models import LogCategory, LogEvent

logger = logging.getLogger(__name__)

Sink = Union[str, "os.PathLike[str]", IO[str], None]
"""Anything :meth:`EventLog.start` accepts: ``None``/``"-"`` for stdout, a path, or a text stream."""


class EventLog:
    """Structured event sink for a :class:`~reqcache.client.session.Session`.

    Example::

        log = EventLog()
        log.start("requests.log")
        log.emit(LogCategory.MESSAGE, message="warming cache")
        log.stop()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sink: Optional[IO[str]] = None
        self._owned = False
        self._name = ""

    @property
    def active(self) -> bool:
        """Whether a sink is currently bound."""
        return self._sink is not None

    @property
    def sink_name(self) -> str:
        """Display name of the bound sink (file path or ``<stdout>``), empty when unbound."""
        return self._name

    def start(self, sink: Sink = None) -> None:
        """Bind the log to *sink*, replacing any previous binding.

        Args:
            sink: ``None`` or ``"-"`` for standard output, a filesystem path
                (opened in append mode and closed by :meth:`stop`), or an
                already open text stream that the caller keeps ownership of.

        Raises:
            LogWriteError: If a path sink cannot be opened.
            InvalidUsageError: If *sink* is not writable.
        """
        with self._lock:
            self._release()
            if sink is None or sink == "-":
                self._sink = sys.stdout
                self._name = "<stdout>"
            elif isinstance(sink, (str, os.PathLike)):
                path = Path(sink).expanduser()
                try:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    self._sink = open(path, "a", encoding="utf-8")
                except OSError as exc:
                    raise LogWriteError(f"Cannot open log file {path}: {exc}") from exc
                self._owned = True
                self._name = str(path)
            elif hasattr(sink, "write"):
                self._sink = sink
                self._name = getattr(sink, "name", None) or repr(sink)
            else:
                raise InvalidUsageError(f"Log sink must be a path or a writable stream, got {sink!r}")

    def stop(self) -> None:
        """Unbind the current sink, closing it if the log opened it."""
        with self._lock:
            self._release()

    def write(self, event: LogEvent) -> LogEvent:
        """Append *event* to the bound sink.

        Returns:
            The same event, for chaining.

        Raises:
            LogWriteError: If the sink cannot be written.
        """
        logger.debug(
            "%s %s %s %s",
            event.category.value,
            event.verb or "",
            event.url or "",
            event.message,
        )
        with self._lock:
            if self._sink is None:
                return event
            line = event.model_dump_json() + "\n"
            try:
                self._sink.write(line)
                self._sink.flush()
            except (OSError, ValueError) as exc:
                # ValueError is what a closed file object raises on write.
                raise LogWriteError(f"Cannot write to log sink {self._name}: {exc}") from exc
        return event

    def emit(self, category: LogCategory, **fields: Any) -> LogEvent:
        """Build a :class:`~reqcache.models.LogEvent` from *fields* and write it."""
        return self.write(LogEvent(category=category, **fields))

    def _release(self) -> None:
        """Drop the current sink. Caller holds the lock."""
        sink, owned = self._sink, self._owned
        self._sink = None
        self._owned = False
        self._name = ""
        if sink is not None and owned:
            try:
                sink.close()
            except OSError as exc:
                raise LogWriteError(f"Cannot close log sink: {exc}") from exc
