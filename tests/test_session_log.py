"""Tests for transcript aggregation and its mtime-aware cache."""

import json
import os

import cc_statusline.app.session_log as session_log
from cc_statusline.app.session_log import (
    SessionLogAggregate,
    SessionLogCache,
    TaskProgress,
    aggregate_lines,
    scan_session_log,
)
from cc_statusline.core.ttl_cache import TTLCache
from conftest import assistant_line, todo_line


class TestAggregateLines:
    def test_empty_input_is_zero_aggregate(self):
        assert aggregate_lines([]) == SessionLogAggregate.empty()

    def test_token_totals(self):
        agg = aggregate_lines(
            [
                assistant_line(input_tokens=100, output_tokens=20, cache_creation=50, cache_read=1000),
                assistant_line(input_tokens=200, output_tokens=30, cache_creation=10, cache_read=2000),
            ]
        )
        usage = agg.token_usage
        # cache reads never count toward consumption
        assert usage.total_consumed == 100 + 20 + 50 + 200 + 30 + 10
        assert usage.output == 50
        assert usage.input == 200
        assert usage.cache_read == 2000
        assert usage.context_size == 200 + 10 + 2000

    def test_malformed_lines_skipped(self):
        agg = aggregate_lines(
            [
                "{not json",
                "",
                "[1, 2, 3]",
                assistant_line(input_tokens=5, output_tokens=5),
                '{"type": "assistant", "message": "oops"}',
            ]
        )
        assert agg.token_usage.total_consumed == 10

    def test_out_of_range_numbers_skip_only_their_line(self):
        good_first = assistant_line(input_tokens=10, output_tokens=5)
        good_last = assistant_line(input_tokens=1, output_tokens=1)
        for bad in (
            '{"type": "assistant", "message": {"usage": {"input_tokens": 1e400}}}',
            '{"type": "assistant", "message": {"usage": {"input_tokens": Infinity}}}',
            '{"type": "assistant", "message": {"usage": {"input_tokens": NaN}}}',
            "[" * 200_000,
        ):
            agg = aggregate_lines([good_first, bad, good_last])
            assert agg.token_usage.total_consumed == 17

    def test_non_finite_counts_are_zero(self):
        assert session_log._count(float("inf")) == 0
        assert session_log._count(float("nan")) == 0
        assert session_log._count(True) == 0
        assert session_log._count(7.9) == 7

    def test_non_assistant_usage_ignored(self):
        line = json.dumps({"type": "user", "message": {"usage": {"input_tokens": 999}}})
        assert aggregate_lines([line]).token_usage.total_consumed == 0

    def test_last_task_list_wins(self):
        agg = aggregate_lines(
            [
                todo_line(["completed", "pending", "pending", "pending"]),
                todo_line(["completed", "completed", "in_progress"]),
            ]
        )
        assert agg.task_progress == TaskProgress(completed=2, in_progress=1, pending=0, total=3)
        assert agg.task_progress.percent == 67

    def test_flat_tool_record(self):
        line = json.dumps(
            {
                "tool_name": "TodoWrite",
                "tool_input": {"todos": [{"status": "completed"}, {"status": "pending"}]},
            }
        )
        progress = aggregate_lines([line]).task_progress
        assert (progress.completed, progress.pending, progress.total) == (1, 1, 2)

    def test_other_tools_ignored(self):
        line = json.dumps(
            {
                "type": "assistant",
                "message": {"content": [{"type": "tool_use", "name": "Bash", "input": {"todos": [{}]}}]},
            }
        )
        assert aggregate_lines([line]).task_progress.total == 0

    def test_percent_of_empty_list(self):
        assert TaskProgress().percent == 0

    def test_percent_rounds_half_up(self):
        assert TaskProgress(completed=1, total=8).percent == 13


class TestScanSessionLog:
    def test_missing_file_is_none(self, tmp_path):
        assert scan_session_log(str(tmp_path / "nope.jsonl")) is None

    def test_reads_file(self, write_log):
        path = write_log([assistant_line(input_tokens=1, output_tokens=2)])
        assert scan_session_log(path).token_usage.total_consumed == 3


class TestSessionLogCache:
    def test_missing_path_yields_empty(self, tmp_path):
        cache = SessionLogCache()
        assert cache.load("") is None
        assert cache.load(str(tmp_path / "nope")) is None
        assert cache.fetch(str(tmp_path / "nope")) == SessionLogAggregate.empty()
        assert cache.size == 0

    def test_cached_until_ttl(self, write_log, clock, monkeypatch):
        path = write_log([assistant_line(input_tokens=1)])
        cache = SessionLogCache(TTLCache(ttl=2.0, max_size=10, clock=clock))
        scans = []

        real_scan = session_log.scan_session_log

        def counting_scan(p):
            scans.append(p)
            return real_scan(p)

        monkeypatch.setattr(session_log, "scan_session_log", counting_scan)

        cache.fetch(path)
        clock.advance(1.5)
        cache.fetch(path)
        assert len(scans) == 1

        clock.advance(1.0)
        cache.fetch(path)
        assert len(scans) == 2

    def test_rescans_when_file_modified(self, write_log, clock):
        path = write_log([assistant_line(input_tokens=1)])
        cache = SessionLogCache(TTLCache(ttl=60, max_size=10, clock=clock))
        assert cache.fetch(path).token_usage.total_consumed == 1

        with open(path, "a", encoding="utf-8") as f:
            f.write(assistant_line(input_tokens=10) + "\n")
        stat = os.stat(path)
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

        assert cache.fetch(path).token_usage.total_consumed == 11

    def test_clear(self, write_log):
        cache = SessionLogCache()
        cache.fetch(write_log([assistant_line(input_tokens=1)]))
        assert cache.size == 1
        cache.clear()
        assert cache.size == 0
