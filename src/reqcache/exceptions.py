"""Exception hierarchy for reqcache.

All exceptions inherit from :class:`ReqcacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`reqcache.exit_codes`.
Library code only raises; the command-line entry point in
:func:`reqcache.app.main` catches ``ReqcacheError`` and exits with the
appropriate code.

Subclass hierarchy::

    ReqcacheError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- InvalidPatternError    (exit 2)
    +-- TransportError         (exit 5)
    |   +-- AuthError          (exit 3)
    |   +-- NotFoundError      (exit 4)
    |   +-- ClientError        (exit 5)
    |   +-- ServerError        (exit 5)
    |   +-- ConnectionError_   (exit 6)
    +-- HaltError              (exit 1)
    +-- SnapshotError          (exit 8)
    +-- LogWriteError          (exit 9)
    +-- LogFormatError         (exit 9)
    +-- ConfigError            (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from reqcache.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CACHE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LOG_ERROR,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)

if TYPE_CHECKING:
    from reqcache.models import LogEvent


class ReqcacheError(Exception):
    """Base exception for all reqcache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`reqcache.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ReqcacheError):
    """Raised for invalid arguments, such as an unsupported HTTP verb."""

    exit_code = EXIT_INVALID_USAGE


class InvalidPatternError(ReqcacheError):
    """Raised when ``drop_pattern`` receives a regular expression that does not compile."""

    exit_code = EXIT_INVALID_USAGE


class TransportError(ReqcacheError):
    """Base class for failures reported by the HTTP transport.

    Args:
        message: Human-readable error description.
        status_code: HTTP status of the failed response, if one was received.
        response: The raw response object, if one was received.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class AuthError(TransportError):
    """Raised when the API answers 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(TransportError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ClientError(TransportError):
    """Raised for any other HTTP 4xx response."""


class ServerError(TransportError):
    """Raised when the API returns an HTTP 5xx server error."""


class ConnectionError_(TransportError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class HaltError(ReqcacheError):
    """User-raised failure produced by :func:`reqcache.halt`.

    Args:
        message: The text passed to ``halt``.
        event: The ``ERROR`` log event that was written for this failure,
            or ``None`` when no log sink was bound.
    """

    def __init__(self, message: str, event: Optional[LogEvent] = None):
        super().__init__(message)
        self.event = event


class SnapshotError(ReqcacheError):
    """Raised when a cache snapshot is missing, corrupt, or cannot be written."""

    exit_code = EXIT_CACHE_ERROR


class LogWriteError(ReqcacheError):
    """Raised when the bound log sink cannot be written (closed file, full disk)."""

    exit_code = EXIT_LOG_ERROR


class LogFormatError(ReqcacheError):
    """Raised when a log line cannot be parsed back into a :class:`~reqcache.models.LogEvent`."""

    exit_code = EXIT_LOG_ERROR


class ConfigError(ReqcacheError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
