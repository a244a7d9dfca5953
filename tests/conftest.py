"""Shared test fixtures for reqcache.

Provides an in-memory transport, isolated config environments, output
state management, and a CLI runner. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pytest

from reqcache.api import reset_session
from reqcache.client.session import Session
from reqcache.exceptions import ServerError
from reqcache.output import OutputFormat, OutputManager, reset_output, set_output


BASE = "https://api.example.com"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals_between_tests() -> None:
    """Reset the global OutputManager and default session after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file"). Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()
    reset_session()


# ---------------------------------------------------------------------------
# In-memory transport
# ---------------------------------------------------------------------------


@dataclass
class FakeResponse:
    """Minimal response object compared by value."""

    status_code: int
    url: str
    body: Any = None


@dataclass
class FakeTransport:
    """Transport double that records every call.

    Responses are :class:`FakeResponse` values echoing the request. Set
    ``fail_with`` to make every following call raise that exception.
    """

    calls: list[tuple[str, str, Any, dict[str, Any]]] = field(default_factory=list)
    fail_with: Optional[Exception] = None
    status_code: int = 200

    def request(self, method: str, url: str, body: Any = None, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, body, kwargs))
        if self.fail_with is not None:
            raise self.fail_with
        return FakeResponse(status_code=self.status_code, url=url, body=body)

    @property
    def methods(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def transport() -> FakeTransport:
    """A fresh recording transport."""
    return FakeTransport()


@pytest.fixture
def failing_transport() -> FakeTransport:
    """A transport whose every call raises a :class:`ServerError`."""
    return FakeTransport(fail_with=ServerError("HTTP 503", status_code=503))


@pytest.fixture
def log_buffer() -> io.StringIO:
    """Text buffer usable as an event log sink."""
    return io.StringIO()


@pytest.fixture
def session(transport: FakeTransport, log_buffer: io.StringIO) -> Session:
    """A session over the fake transport, logging to ``log_buffer``."""
    s = Session(transport)
    s.start_log(log_buffer)
    yield s
    s.close()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all REQCACHE_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["REQCACHE_BASE_URL", "REQCACHE_LOG", "REQCACHE_CACHE"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.setattr("reqcache.config._is_xdg_platform", lambda: True)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
