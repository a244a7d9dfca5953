"""Numeric process exit codes used by the ``reqcache`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~reqcache.exceptions.ReqcacheError` subclass.
Library callers never see these values; they only matter once
:func:`reqcache.app.main` converts an exception into a process exit.

Example::

    $ reqcache log summary missing.log
    $ echo $?
    9   # EXIT_LOG_ERROR -- the log file could not be read
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including user-raised ``halt``)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an invalid pattern."""

EXIT_AUTH_FAILURE = 3
"""The transport reported an authentication or authorisation failure."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 4xx/5xx error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CACHE_ERROR = 8
"""A cache snapshot could not be saved or restored."""

EXIT_LOG_ERROR = 9
"""The event log could not be written or parsed."""
