"""Tests for display helpers and recovery counters."""

from claude_archive.archive_schema import Session
from claude_archive.diagnostics import RecoveryStats, record
from claude_archive.formatting import format_size, get_total_size, truncate, truncate_id


def test_format_size():
    assert format_size(0) == "0 B"
    assert format_size(1023) == "1023 B"
    assert format_size(1536) == "1.5 KB"
    assert format_size(5 * 1024 * 1024) == "5.0 MB"
    assert format_size(3 * 1024 ** 3) == "3.0 GB"


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("a much longer string", 10) == "a much ..."


def test_truncate_id():
    assert truncate_id("0123456789abcdef") == "01234567..."


def test_get_total_size():
    sessions = [
        Session(id="a", path="/a.jsonl", project_path="/", size=10),
        Session(id="b", path="/b.jsonl", project_path="/", size=32),
    ]
    assert get_total_size(sessions) == 42


class TestRecoveryStats:
    """Tests for RecoveryStats."""

    def test_record_counts(self):
        stats = RecoveryStats()
        stats.record("malformed_lines", "/x.jsonl")
        stats.record("malformed_lines", "/x.jsonl")
        stats.record("unreadable_agents", "/agent-1.jsonl", OSError("boom"))

        assert stats.malformed_lines == 2
        assert stats.unreadable_agents == 1
        assert stats.total == 3
        assert stats.paths == ["/x.jsonl", "/x.jsonl", "/agent-1.jsonl"]

    def test_record_without_stats(self):
        """Recording with no stats object only logs."""
        record(None, "malformed_lines", "/x.jsonl")
