"""Structured event logging for reqcache.

* :class:`EventLog` -- the rebindable, append-only sink that sessions write to.
* :func:`load_log_file` / :func:`parse_log_lines` -- read a log back into
  :class:`~reqcache.models.LogEvent` objects.
* :func:`request_log_summary` -- counts by verb and timing statistics.
"""

from reqcache.logs.logger import EventLog
from reqcache.logs.reader import load_log_file, parse_log_lines
from reqcache.logs.summary import request_log_summary

__all__ = ["EventLog", "load_log_file", "parse_log_lines", "request_log_summary"]
