"""Read event logs back into :class:`~reqcache.models.LogEvent` objects."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from reqcache.exceptions import LogFormatError
from reqcache.models import LogEvent


def parse_log_lines(lines: Iterable[str]) -> list[LogEvent]:
    """Parse log lines in order, skipping blank ones.

    Raises:
        LogFormatError: On the first line that is not a valid event,
            naming its 1-based line number.
    """
    events: list[LogEvent] = []
    for lineno, line in enumerate(lines, start=1):
        text = line.strip()
        if not text:
            continue
        try:
            events.append(LogEvent.model_validate_json(text))
        except ValidationError as exc:
            raise LogFormatError(f"Invalid log line {lineno}: {exc}") from exc
    return events


def load_log_file(path: str | Path) -> list[LogEvent]:
    """Load every event from the log file at *path*.

    Raises:
        LogFormatError: If the file cannot be read or holds a malformed line.
    """
    log_path = Path(path).expanduser()
    try:
        with open(log_path, encoding="utf-8") as f:
            return parse_log_lines(f)
    except OSError as exc:
        raise LogFormatError(f"Cannot read log file {log_path}: {exc}") from exc
