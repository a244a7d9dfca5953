"""Tests for the module-level functions bound to the default session."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

import reqcache
from reqcache.client import HttpxTransport, Session
from reqcache.exceptions import HaltError


BASE = "https://api.example.com"


@pytest.fixture()
def default_session(transport) -> Session:
    """Install a session over the fake transport as the default one."""
    session = Session(transport)
    reqcache.set_session(session)
    return session


class TestDefaultSession:
    def test_lazily_built_from_config(self, isolated_config: Path) -> None:
        session = reqcache.get_session()
        assert isinstance(session._transport, HttpxTransport)
        assert reqcache.get_session() is session

    def test_config_applied(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REQCACHE_CACHE", "off")
        assert reqcache.get_session().cache_enabled is False

    def test_reset_closes_and_forgets(self, default_session: Session, log_buffer) -> None:
        reqcache.start_log(log_buffer)
        reqcache.reset_session()
        assert not default_session.log.active


class TestModuleFunctions:
    def test_get_and_hit(self, default_session: Session, transport) -> None:
        first = reqcache.get(f"{BASE}/projects/")
        assert reqcache.get(f"{BASE}/projects/") == first
        assert len(transport.calls) == 1
        assert reqcache.has_cache(f"{BASE}/projects/")

    def test_writes_invalidate(self, default_session: Session) -> None:
        for path in ("/projects/", "/projects/1/", "/other/"):
            reqcache.get(f"{BASE}{path}")
        reqcache.put(f"{BASE}/projects/", {"name": "x"})
        assert reqcache.cache_keys() == [f"{BASE}/other/"]
        reqcache.post(f"{BASE}/other/", {})
        assert reqcache.cache_keys() == []

    def test_patch_and_delete(self, default_session: Session, transport) -> None:
        reqcache.patch(f"{BASE}/a", {})
        reqcache.delete(f"{BASE}/a")
        assert transport.methods == ["PATCH", "DELETE"]

    def test_cached_post(self, default_session: Session) -> None:
        reqcache.cached_post(f"{BASE}/search", {"q": 1})
        assert len(reqcache.cache_keys()) == 1

    def test_explicit_drops(self, default_session: Session) -> None:
        for path in ("/a", "/a/1", "/b"):
            reqcache.set_cache(f"{BASE}{path}", path)
        assert reqcache.drop_only(f"{BASE}/a") == [f"{BASE}/a"]
        assert reqcache.drop_pattern("/b$") == [f"{BASE}/b"]
        assert reqcache.drop_cache(f"{BASE}/a") == [f"{BASE}/a/1"]
        reqcache.set_cache("k", 1)
        assert reqcache.clear_cache() == ["k"]

    def test_logging(self, default_session: Session, log_buffer) -> None:
        reqcache.start_log(log_buffer)
        reqcache.log_message("hello")
        with pytest.raises(HaltError):
            reqcache.halt("stop")
        reqcache.stop_log()
        reqcache.log_message("unlogged")
        categories = [json.loads(line)["category"] for line in log_buffer.getvalue().splitlines()]
        assert categories == ["MESSAGE", "ERROR"]

    def test_switches(self, default_session: Session, transport) -> None:
        reqcache.get(f"{BASE}/a")
        with reqcache.uncached():
            reqcache.get(f"{BASE}/a")
        reqcache.cache_off()
        assert reqcache.cache_keys() == []
        reqcache.cache_on()
        reqcache.get(f"{BASE}/a")
        assert len(transport.calls) == 3
        assert reqcache.get_cache(f"{BASE}/a") is not None

    def test_save_and_load(self, default_session: Session, tmp_path: Path) -> None:
        reqcache.set_cache(f"{BASE}/a", {"body": 1})
        reqcache.save_cache(tmp_path / "snap")
        reqcache.clear_cache()
        assert reqcache.load_cache(tmp_path / "snap") == 1
        assert reqcache.get_cache(f"{BASE}/a") == {"body": 1}


class TestFullFlow:
    def test_log_summary_of_a_session(self, default_session: Session, tmp_path: Path) -> None:
        log_path = tmp_path / "requests.log"
        reqcache.start_log(log_path)
        reqcache.get(f"{BASE}/projects/")
        reqcache.get(f"{BASE}/projects/")
        reqcache.post(f"{BASE}/projects/", {"name": "n"})
        reqcache.stop_log()

        summary = reqcache.request_log_summary(reqcache.load_log_file(log_path))
        assert summary.counts == {"GET": 2, "POST": 1}
        assert (summary.hits, summary.sets, summary.drops) == (1, 1, 1)
        assert summary.timing.count == 2

    def test_buffer_sink(self, default_session: Session) -> None:
        buf = io.StringIO()
        reqcache.start_log(buf)
        reqcache.get(f"{BASE}/x")
        assert len(buf.getvalue().splitlines()) == 2
