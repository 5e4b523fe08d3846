"""
Suggestion merger — combines remote, local and static candidates.

Sources are consumed in a fixed order (remote, local, static) and
deduplicated on the suggestion text, so an earlier source always claims
a token before a later one regardless of priority values.  The result is
sorted by priority, then alphabetically, and capped.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from sarthi.autocomplete.models import SourceKind, Suggestion
from sarthi.autocomplete.snippets import SnippetCatalog
from sarthi.remote.protocol import SuggestionEntry, entry_text

logger = logging.getLogger(__name__)

REMOTE_PRIORITY = 20
LOCAL_PRIORITY = 15


class SuggestionMerger:
    """Merge the three suggestion sources into one ranked list."""

    def __init__(
        self,
        catalog: Optional[SnippetCatalog] = None,
        max_suggestions: int = 10,
    ) -> None:
        self._catalog = catalog or SnippetCatalog()
        self._max_suggestions = max_suggestions

    @property
    def catalog(self) -> SnippetCatalog:
        return self._catalog

    def merge(
        self,
        prefix: str,
        remote_batch: Sequence[SuggestionEntry],
        local_words: Iterable[str],
        language: str,
    ) -> list[Suggestion]:
        combined: list[Suggestion] = []
        seen: set[str] = set()
        prefix_lower = prefix.lower()

        # The cached batch may answer an older prefix, so filter it again
        for entry in remote_batch:
            text = entry_text(entry)
            if not text or not text.lower().startswith(prefix_lower) or text in seen:
                continue
            combined.append(Suggestion(text, text, text, SourceKind.REMOTE, REMOTE_PRIORITY))
            seen.add(text)

        for word in local_words:
            if word == prefix or word in seen:
                continue
            combined.append(Suggestion(word, word, word, SourceKind.LOCAL, LOCAL_PRIORITY))
            seen.add(word)

        for snippet in self._catalog.matching(prefix, language):
            if snippet.token in seen:
                continue
            combined.append(snippet.to_suggestion())
            seen.add(snippet.token)

        combined.sort(key=lambda s: (-s.priority, s.text))
        return combined[: self._max_suggestions]
