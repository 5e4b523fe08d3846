"""Tests for the CompletionEngine orchestrator."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from sarthi.autocomplete.engine import CompletionEngine
from sarthi.autocomplete.models import SourceKind
from sarthi.autocomplete.trie import PrefixIndex
from sarthi.remote.client import RemoteSuggestionClient
from sarthi.remote.state import ConnectionPhase

SOURCE = "int total = 0;\nfor (int i = 0; i < n; i++) total += totalCount;\n"


@pytest.fixture
def engine(settings, client, scheduler) -> CompletionEngine:
    return CompletionEngine(settings=settings, client=client, scheduler=scheduler)


class TestLifecycle:
    def test_start_connects_and_indexes(self, engine, channels):
        engine.set_buffer(SOURCE, "cpp")
        engine.start()
        assert engine.is_running
        assert len(channels.channels) == 1
        assert engine.index.query("tot") == ["total", "totalCount"]

    def test_buffer_indexed_on_next_tick(self, engine, scheduler):
        engine.start()
        engine.set_buffer(SOURCE, "cpp")
        assert engine.index.size == 0
        scheduler.advance(2.0)
        assert engine.index.query("tot") == ["total", "totalCount"]

    def test_index_rebuilt_not_appended(self, engine, scheduler):
        engine.set_buffer("int alphaValue = 1;", "cpp")
        engine.start()
        engine.set_buffer("int betaValue = 1;", "cpp")
        scheduler.advance(2.0)
        assert engine.index.query("al") == []
        assert engine.index.query("be") == ["betaValue"]

    def test_timer_keeps_firing(self, engine, scheduler):
        engine.start()
        for name in ("firstName", "secondName", "thirdName"):
            engine.set_buffer(f"int {name};", "cpp")
            scheduler.advance(2.0)
            assert engine.index.query(name[:3]) == [name]

    def test_close_cancels_timers_and_destroys_client(self, engine, channels, scheduler):
        engine.start()
        channels.last.open()
        engine.close()

        assert not engine.is_running
        assert engine.client.phase is ConnectionPhase.DESTROYED
        assert channels.last.closed == (1000, "Client cleanup")
        assert scheduler.pending == []

    def test_close_during_reconnect_leaves_nothing_scheduled(self, engine, channels, scheduler):
        engine.start()
        scheduler.advance(45.0)  # connection timeout, reconnect pending
        engine.close()
        assert scheduler.pending == []
        scheduler.advance(10_000)
        assert len(channels.channels) == 1

    def test_double_start_ignored(self, engine, channels):
        engine.start()
        engine.start()
        assert len(channels.channels) == 1

    def test_reindex_errors_swallowed(self, settings, client, scheduler):
        tokenizer = MagicMock()
        tokenizer.rebuild.side_effect = RuntimeError("bad buffer")
        engine = CompletionEngine(settings=settings, client=client, scheduler=scheduler, tokenizer=tokenizer)
        engine.set_buffer("int x;", "cpp")
        engine.reindex()
        engine.start()
        scheduler.advance(2.0)
        assert tokenizer.rebuild.call_count == 3


class TestComplete:
    def test_extract_prefix(self, engine):
        assert engine.extract_prefix("    total += to") == "to"
        assert engine.extract_prefix("#inc") == "#inc"
        assert engine.extract_prefix("std::ve") == "std::ve"
        assert engine.extract_prefix("x = t") is None
        assert engine.extract_prefix("foo(") is None

    def test_short_prefix_yields_nothing(self, engine):
        engine.set_buffer(SOURCE, "cpp")
        engine.reindex()
        assert engine.complete("x = t") == []

    def test_local_suggestions(self, engine):
        engine.set_buffer(SOURCE, "cpp")
        engine.reindex()
        result = engine.complete("    x = to")
        assert [s.text for s in result] == ["total", "totalCount"]
        assert all(s.source_kind is SourceKind.LOCAL for s in result)
        assert engine.current_prefix == "to"

    def test_static_snippets_included(self, engine):
        result = engine.complete("#in")
        assert [s.text for s in result] == ["#include"]

    def test_offline_still_completes(self, engine, channels, scheduler):
        engine.set_buffer(SOURCE, "cpp")
        engine.start()
        scheduler.advance(300.0)  # 45 + 5 + 45 + 10 + 45 + 15 + 45
        assert engine.client.phase is ConnectionPhase.CLOSED_PERMANENTLY
        assert [s.text for s in engine.complete("to")] == ["total", "totalCount"]

    def test_query_is_fire_and_forget(self, engine, channels):
        engine.set_buffer(SOURCE, "cpp")
        engine.start()
        channel = channels.last
        channel.open()

        first = engine.complete("tog")
        assert first == []
        assert channel.sent_json[-1]["word"] == "tog"
        assert channel.sent_json[-1]["language"] == "cpp"

        # The backend answers; only later edits see the batch
        channel.receive({"suggestions": ["toggle", "total"]})
        result = engine.complete("to")
        assert [(s.text, s.source_kind) for s in result] == [
            ("toggle", SourceKind.REMOTE),
            ("total", SourceKind.REMOTE),
            ("totalCount", SourceKind.LOCAL),
        ]

    def test_stale_batch_refiltered(self, engine, channels):
        engine.start()
        channels.last.open()
        channels.last.receive(["toggle"])
        assert engine.complete("ma") == []

    def test_language_override(self, engine, channels):
        engine.start()
        channels.last.open()
        result = engine.complete("de", language="python")
        assert [s.text for s in result] == ["def"]
        assert channels.last.sent_json[-1]["language"] == "python"

    def test_errors_yield_empty_list(self, settings, client, scheduler):
        index = MagicMock(spec=PrefixIndex)
        index.query.side_effect = RuntimeError("corrupt")
        engine = CompletionEngine(settings=settings, client=client, scheduler=scheduler, index=index)
        assert engine.complete("to") == []

    def test_commit_replaces_prefix(self, engine):
        engine.set_buffer(SOURCE, "cpp")
        engine.reindex()
        engine.complete("    for")
        snippet = engine.complete("fo")[0]
        commit = engine.commit(snippet.insert_text)
        assert commit.insert_text == "for (int i = 0; i < n; i++) {\n\t\n}"
        assert commit.replace_length == 2

    def test_commit_after_caret_leaves_word_replaces_nothing(self, engine):
        engine.set_buffer(SOURCE, "cpp")
        engine.reindex()
        assert engine.complete("    tot") != []
        assert engine.current_prefix == "tot"

        assert engine.complete("x = y") == []
        assert engine.current_prefix == ""
        commit = engine.commit("yes")
        assert commit.insert_text == "yes"
        assert commit.replace_length == 0


class TestStatus:
    def test_status_reports_remote_state(self, engine, channels):
        engine.set_buffer(SOURCE, "cpp")
        engine.start()
        channels.last.open()
        status = engine.status()
        assert status["running"] is True
        assert status["indexed_identifiers"] == 2
        assert status["remote"]["phase"] == "open"
        assert engine.connected

    def test_default_client_wired_from_settings(self, settings, scheduler):
        engine = CompletionEngine(settings=settings, scheduler=scheduler)
        assert isinstance(engine.client, RemoteSuggestionClient)
        assert engine.client.phase is ConnectionPhase.DISCONNECTED
