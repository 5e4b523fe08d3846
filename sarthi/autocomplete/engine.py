"""
Completion engine — owns every suggestion source and answers edits.

The buffer is re-tokenized into the prefix index on a fixed timer,
independently of keystrokes.  Each edit derives the prefix under the
caret, fires a remote query and merges whatever the three sources hold
at that moment.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from sarthi.autocomplete.merger import SuggestionMerger
from sarthi.autocomplete.models import Commit, Suggestion
from sarthi.autocomplete.snippets import SnippetCatalog
from sarthi.autocomplete.tokenizer import IdentifierTokenizer
from sarthi.autocomplete.trie import PrefixIndex
from sarthi.config.settings import Settings, get_settings
from sarthi.remote.client import RemoteSuggestionClient, StatusObserver
from sarthi.remote.timers import AsyncioScheduler, TimerHandle, TimerScheduler

logger = logging.getLogger(__name__)

# Trailing word under the caret; '#' and ':' allow "#include" and "std::"
_PREFIX_RE = re.compile(r"([A-Za-z0-9_#:]+)$")


class CompletionEngine:
    """
    Orchestrates tokenizer, prefix index, remote client and merger.

    Typical usage (inside a running event loop)::

        engine = CompletionEngine(settings)
        engine.start()
        engine.set_buffer(source_text, "cpp")
        suggestions = engine.complete(text_before_caret)
        # ... later ...
        engine.close()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        index: Optional[PrefixIndex] = None,
        tokenizer: Optional[IdentifierTokenizer] = None,
        catalog: Optional[SnippetCatalog] = None,
        merger: Optional[SuggestionMerger] = None,
        client: Optional[RemoteSuggestionClient] = None,
        scheduler: Optional[TimerScheduler] = None,
        on_status: Optional[StatusObserver] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._completion = self._settings.completion
        self._scheduler = scheduler or AsyncioScheduler()
        self._index = index or PrefixIndex()
        self._tokenizer = tokenizer or IdentifierTokenizer()
        self._merger = merger or SuggestionMerger(
            catalog=catalog,
            max_suggestions=self._completion.max_suggestions,
        )
        self._client = client or RemoteSuggestionClient(
            settings=self._settings.remote,
            scheduler=self._scheduler,
            on_status=on_status,
        )

        self._buffer = ""
        self._language = self._completion.default_language
        self._current_prefix = ""
        self._parse_timer: Optional[TimerHandle] = None
        self._running = False

    @property
    def index(self) -> PrefixIndex:
        return self._index

    @property
    def client(self) -> RemoteSuggestionClient:
        return self._client

    @property
    def current_prefix(self) -> str:
        return self._current_prefix

    @property
    def language(self) -> str:
        return self._language

    @property
    def connected(self) -> bool:
        return self._client.connected

    @property
    def is_running(self) -> bool:
        return self._running

    # ----- lifecycle -----

    def start(self) -> None:
        """Connect to the backend and begin periodic re-tokenization."""
        if self._running:
            logger.warning("Engine already running — skipping start()")
            return
        self._running = True
        self._client.connect()
        self.reindex()
        self._arm_parse_timer()
        logger.info("Autocomplete ready")

    def close(self) -> None:
        """Stop the re-tokenization timer, then tear down the remote client."""
        if self._parse_timer is not None:
            self._parse_timer.cancel()
            self._parse_timer = None
        self._running = False
        self._client.destroy()
        logger.info("Engine cleaned up")

    def _arm_parse_timer(self) -> None:
        self._parse_timer = self._scheduler.call_later(
            self._completion.parse_interval, self._on_parse_tick,
        )

    def _on_parse_tick(self) -> None:
        self._parse_timer = None
        if not self._running:
            return
        self.reindex()
        self._arm_parse_timer()

    # ----- buffer -----

    def set_buffer(self, text: str, language: Optional[str] = None) -> None:
        """Record the latest buffer snapshot; it is indexed on the next tick."""
        self._buffer = text
        if language:
            self._language = language

    def reindex(self) -> None:
        """Rebuild the prefix index from the current buffer snapshot."""
        try:
            self._tokenizer.rebuild(self._buffer, self._language, self._index)
        except Exception:
            logger.warning("Parse error", exc_info=True)

    # ----- edits -----

    def extract_prefix(self, text_before_caret: str) -> Optional[str]:
        """Word being typed, or None if it is shorter than the minimum."""
        match = _PREFIX_RE.search(text_before_caret)
        if not match or len(match.group(1)) < self._completion.min_prefix_length:
            return None
        return match.group(1)

    def complete(self, text_before_caret: str, language: Optional[str] = None) -> list[Suggestion]:
        """
        Ranked suggestions for the word ending at the caret.

        Fires a remote query for the prefix; its answer only affects later
        calls.  Never raises: unexpected failures yield an empty list.
        """
        try:
            prefix = self.extract_prefix(text_before_caret)
            if prefix is None:
                self._current_prefix = ""
                return []
            language = language or self._language
            self._current_prefix = prefix

            self._client.query(prefix, language)
            return self._merger.merge(
                prefix,
                self._client.suggestions,
                self._index.query(prefix),
                language,
            )
        except Exception:
            logger.exception("Input handling error")
            return []

    def commit(self, insert_text: str) -> Commit:
        """
        Edit that replaces the current prefix with *insert_text*.

        The prefix is the one found by the last ``complete`` call; after a
        call that found none, nothing is replaced.
        """
        logger.debug("Inserted: %s", insert_text)
        return Commit(
            insert_text=insert_text,
            replace_length=len(self._current_prefix),
        )

    def status(self) -> dict:
        return {
            "running": self._running,
            "language": self._language,
            "indexed_identifiers": self._index.size,
            "remote": self._client.status(),
        }
