"""Unit tests for process memory sampling."""

from types import SimpleNamespace

import cc_statusline.app.memory_stats


def test_capture_snapshot_reads_rss(monkeypatch):
    monkeypatch.setattr(
        cc_statusline.app.memory_stats.psutil,
        "Process",
        lambda: SimpleNamespace(memory_info=lambda: SimpleNamespace(rss=2048, vms=4096)),
    )

    snapshot = cc_statusline.app.memory_stats.capture_snapshot()

    assert snapshot == {"rss_bytes": 2048}


def test_capture_snapshot_real_process():
    snapshot = cc_statusline.app.memory_stats.capture_snapshot()

    assert snapshot["rss_bytes"] > 0
