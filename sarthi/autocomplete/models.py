"""Plain data records shared by the completion sources and the merger."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SourceKind(str, Enum):
    """Where a suggestion came from."""

    REMOTE = "remote"
    LOCAL = "local"
    SNIPPET_STL = "snippet-stl"
    SNIPPET_ALGO = "snippet-algo"
    SNIPPET_CONTROL = "snippet-control"
    SNIPPET_INCLUDE = "snippet-include"
    SNIPPET_CLASS = "snippet-class"
    KEYWORD = "keyword"

    @property
    def label(self) -> str:
        """Short badge text shown next to a suggestion."""
        return _LABELS.get(self, "Keyword")


_LABELS = {
    SourceKind.REMOTE: "Smart",
    SourceKind.LOCAL: "Local",
    SourceKind.SNIPPET_STL: "STL",
    SourceKind.SNIPPET_ALGO: "Algorithm",
    SourceKind.SNIPPET_CONTROL: "Snippet",
    SourceKind.SNIPPET_INCLUDE: "Include",
    SourceKind.SNIPPET_CLASS: "Class",
    SourceKind.KEYWORD: "Keyword",
}


@dataclass(frozen=True)
class Suggestion:
    """A single completion candidate."""

    text: str
    description: str
    insert_text: str
    source_kind: SourceKind
    priority: int

    @property
    def label(self) -> str:
        return self.source_kind.label


@dataclass(frozen=True)
class SnippetEntry:
    """A static completion shipped with the engine."""

    token: str
    description: str
    insert_text: str
    category: SourceKind
    priority: int

    def to_suggestion(self) -> Suggestion:
        return Suggestion(
            text=self.token,
            description=self.description,
            insert_text=self.insert_text,
            source_kind=self.category,
            priority=self.priority,
        )


@dataclass(frozen=True)
class Commit:
    """Edit the host editor should apply when a suggestion is chosen."""

    insert_text: str
    replace_length: int
