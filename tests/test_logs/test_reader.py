"""Tests for reading event logs back."""

from __future__ import annotations

from pathlib import Path

import pytest

from reqcache.exceptions import LogFormatError
from reqcache.logs import load_log_file, parse_log_lines
from reqcache.models import LogCategory, LogEvent


def _line(**fields) -> str:
    return LogEvent(**fields).model_dump_json()


class TestParseLogLines:
    def test_preserves_order_and_fields(self) -> None:
        lines = [
            _line(category=LogCategory.HTTP, verb="GET", url="https://x/a", elapsed=0.25),
            _line(category=LogCategory.CACHE_SET, verb="GET", url="https://x/a"),
        ]
        events = parse_log_lines(lines)
        assert [e.category for e in events] == [LogCategory.HTTP, LogCategory.CACHE_SET]
        assert events[0].elapsed == 0.25
        assert events[1].elapsed is None

    def test_skips_blank_lines(self) -> None:
        lines = ["", _line(category=LogCategory.MESSAGE, message="hi"), "   \n"]
        assert len(parse_log_lines(lines)) == 1

    def test_category_with_space_round_trips(self) -> None:
        (event,) = parse_log_lines([_line(category=LogCategory.CACHE_HIT, url="u")])
        assert event.category is LogCategory.CACHE_HIT

    def test_malformed_line_names_line_number(self) -> None:
        lines = [_line(category=LogCategory.MESSAGE), "not json"]
        with pytest.raises(LogFormatError, match="line 2"):
            parse_log_lines(lines)

    def test_unknown_category(self) -> None:
        with pytest.raises(LogFormatError):
            parse_log_lines(['{"category": "BOGUS"}'])


class TestLoadLogFile:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(LogFormatError, match="Cannot read"):
            load_log_file(tmp_path / "missing.log")

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "requests.log"
        path.write_text(_line(category=LogCategory.ERROR, message="stop") + "\n")
        (event,) = load_log_file(path)
        assert event.category is LogCategory.ERROR
        assert event.message == "stop"
