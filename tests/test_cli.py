"""Tests for the reqcache command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from reqcache import __version__
from reqcache.app import app
from reqcache.cache import save_snapshot
from reqcache.models import LogCategory, LogEvent


def _write_log(path: Path) -> Path:
    events = [
        LogEvent(category=LogCategory.HTTP, verb="GET", url="https://x/a", elapsed=0.2, status_code=200),
        LogEvent(category=LogCategory.CACHE_SET, verb="GET", url="https://x/a"),
        LogEvent(category=LogCategory.CACHE_HIT, verb="GET", url="https://x/a"),
        LogEvent(category=LogCategory.HTTP, verb="PUT", url="https://x/a", elapsed=0.4, status_code=200),
        LogEvent(category=LogCategory.CACHE_DROP, verb="PUT", url="https://x/a"),
    ]
    path.write_text("".join(e.model_dump_json() + "\n" for e in events), encoding="utf-8")
    return path


class TestRoot:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# ------------------------------------------------------------------ #
# log
# ------------------------------------------------------------------ #


class TestLogCommands:
    def test_summary_json(self, cli_runner, tmp_path: Path) -> None:
        log = _write_log(tmp_path / "requests.log")
        result = cli_runner.invoke(app, ["--json", "log", "summary", str(log)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["counts"] == {"GET": 2, "PUT": 1}
        assert data["hits"] == 1
        assert data["timing"]["count"] == 2

    def test_summary_plain(self, cli_runner, tmp_path: Path) -> None:
        log = _write_log(tmp_path / "requests.log")
        result = cli_runner.invoke(app, ["--plain", "log", "summary", str(log)])
        assert result.exit_code == 0, result.output
        assert "GET\t2" in result.stdout
        assert "cache drops\t1" in result.stdout

    def test_summary_missing_file_exit_code(self, cli_runner, tmp_path: Path) -> None:
        result = cli_runner.invoke(app, ["--plain", "log", "summary", str(tmp_path / "none.log")])
        assert result.exit_code == 9

    def test_show_filters_category(self, cli_runner, tmp_path: Path) -> None:
        log = _write_log(tmp_path / "requests.log")
        result = cli_runner.invoke(
            app, ["--plain", "log", "show", str(log), "--category", "CACHE HIT"]
        )
        assert result.exit_code == 0, result.output
        rows = result.stdout.strip().splitlines()
        assert len(rows) == 2
        assert "CACHE HIT" in rows[1]


# ------------------------------------------------------------------ #
# cache
# ------------------------------------------------------------------ #


class TestCacheCommands:
    def test_keys(self, cli_runner, tmp_path: Path) -> None:
        snap = save_snapshot({"https://x/b": 1, "https://x/a": 2}, tmp_path / "snap")
        result = cli_runner.invoke(app, ["--plain", "--quiet", "cache", "keys", str(snap)])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["https://x/a", "https://x/b"]

    def test_stats(self, cli_runner, tmp_path: Path) -> None:
        snap = save_snapshot({"https://x/a": {"body": 1}}, tmp_path / "snap")
        result = cli_runner.invoke(app, ["--json", "cache", "stats", str(snap)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["size"] == 1
        assert data["types"] == {"dict": 1}

    def test_missing_snapshot_exit_code(self, cli_runner, tmp_path: Path) -> None:
        result = cli_runner.invoke(app, ["cache", "keys", str(tmp_path / "nowhere")])
        assert result.exit_code == 8

    def test_default_location(self, cli_runner, isolated_config: Path) -> None:
        from reqcache.config import default_snapshot_path

        save_snapshot({"k": 1}, default_snapshot_path())
        result = cli_runner.invoke(app, ["--plain", "--quiet", "cache", "keys"])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "k"


# ------------------------------------------------------------------ #
# config
# ------------------------------------------------------------------ #


class TestConfigCommands:
    def test_show(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--quiet", "config", "show"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["cache"]["enabled"] is True

    @pytest.mark.parametrize(
        "key,value,expected",
        [
            ("cache.enabled", "false", False),
            ("request.timeout", "2.5", 2.5),
            ("request.max_retries", "0", 0),
            ("log.path", "requests.log", "requests.log"),
        ],
    )
    def test_set(self, cli_runner, isolated_config: Path, key, value, expected) -> None:
        result = cli_runner.invoke(app, ["config", "set", key, value])
        assert result.exit_code == 0, result.output

        from reqcache.config import load_global_config

        section, field = key.split(".")
        assert getattr(getattr(load_global_config(), section), field) == expected

    def test_set_unknown_key(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "cache.ttl", "5"])
        assert result.exit_code == 2

    def test_set_bad_number(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "request.max_retries", "many"])
        assert result.exit_code == 2

    def test_reset(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["config", "set", "cache.enabled", "false"])
        result = cli_runner.invoke(app, ["config", "reset", "--force"])
        assert result.exit_code == 0, result.output

        from reqcache.config import load_global_config

        assert load_global_config().cache.enabled is True
