"""Tests for per-widget content hashing and memoization."""

import pytest

from cc_statusline.app.session_log import SessionLogAggregate, TokenUsage
from cc_statusline.app.vcs import GitState
from cc_statusline.app.widget_cache import (
    WidgetContentCache,
    content_hash,
    widget_cache_key,
)
from cc_statusline.core.ttl_cache import MISSING, TTLCache


class TestKeys:
    def test_key_format(self, make_ctx):
        key = widget_cache_key("model", make_ctx())
        wid, digest = key.split(":")
        assert wid == "model"
        assert len(digest) == 8
        int(digest, 16)

    def test_irrelevant_field_keeps_key(self, make_ctx):
        a = make_ctx(cost={"total_cost_usd": 1.0})
        b = make_ctx(cost={"total_cost_usd": 9.0})
        assert widget_cache_key("model", a) == widget_cache_key("model", b)
        assert widget_cache_key("cost", a) != widget_cache_key("cost", b)

    def test_git_change_changes_git_and_files_keys(self, make_ctx):
        a = make_ctx(git=GitState(branch="main"))
        b = make_ctx(git=GitState(branch="main", dirty=True, lines_added=1, files_changed=1))
        assert content_hash("git", a) != content_hash("git", b)
        assert content_hash("files", a) != content_hash("files", b)
        assert content_hash("model", a) == content_hash("model", b)

    def test_session_change_changes_token_keys(self, make_ctx):
        a = make_ctx(session=SessionLogAggregate.empty())
        b = make_ctx(session=SessionLogAggregate(token_usage=TokenUsage(total_consumed=5)))
        for wid in ("tokens", "todo", "context"):
            assert content_hash(wid, a) != content_hash(wid, b)

    def test_context_key_tracks_model(self, make_ctx):
        a = make_ctx(model={"id": "claude-opus-4-5", "display_name": "Opus"})
        b = make_ctx(model={"id": "claude-haiku-4-5", "display_name": "Haiku"})
        assert content_hash("context", a) != content_hash("context", b)

    def test_memory_never_repeats(self, make_ctx):
        ctx = make_ctx()
        assert widget_cache_key("memory", ctx) != widget_cache_key("memory", ctx)

    def test_unknown_widget_hashes_everything(self, make_ctx):
        a = make_ctx(extra="one")
        b = make_ctx(extra="two")
        assert content_hash("custom", a) != content_hash("custom", b)


class TestWidgetContentCache:
    def test_get_or_compute_memoizes(self, make_ctx):
        cache = WidgetContentCache()
        ctx = make_ctx()
        calls = []

        def compute():
            calls.append(1)
            return "text"

        assert cache.get_or_compute("model", ctx, compute) == "text"
        assert cache.get_or_compute("model", ctx, compute) == "text"
        assert len(calls) == 1

    def test_none_result_is_cached(self, make_ctx):
        cache = WidgetContentCache()
        ctx = make_ctx()
        calls = []

        def compute():
            calls.append(1)
            return None

        cache.get_or_compute("git", ctx, compute)
        assert cache.get_or_compute("git", ctx, compute) is None
        assert len(calls) == 1

    def test_expires_after_ttl(self, make_ctx, clock):
        cache = WidgetContentCache(TTLCache(ttl=1.0, max_size=50, clock=clock))
        ctx = make_ctx()
        cache.get_or_compute("cwd", ctx, lambda: "a")
        clock.advance(1.5)
        assert cache.get_or_compute("cwd", ctx, lambda: "b") == "b"

    def test_exception_propagates_and_caches_nothing(self, make_ctx):
        cache = WidgetContentCache()

        def boom():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            cache.get_or_compute("cost", make_ctx(), boom)
        assert cache.size == 0

    def test_get_and_set(self):
        cache = WidgetContentCache()
        assert cache.get("x:00000000") is MISSING
        cache.set("x:00000000", "v")
        assert cache.get("x:00000000") == "v"

    def test_invalidate_by_widget(self, make_ctx):
        cache = WidgetContentCache()
        ctx = make_ctx()
        cache.get_or_compute("model", ctx, lambda: "m")
        cache.get_or_compute("cost", ctx, lambda: "c")
        cache.invalidate("model")
        assert cache.size == 1
        assert cache.get(widget_cache_key("cost", ctx)) == "c"
        cache.invalidate()
        assert cache.size == 0
