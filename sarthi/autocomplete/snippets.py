"""Static per-language completions: library types and control-flow templates."""

from __future__ import annotations

from sarthi.autocomplete.models import SnippetEntry, SourceKind

DEFAULT_LANGUAGE = "cpp"

_STL = SourceKind.SNIPPET_STL
_ALGO = SourceKind.SNIPPET_ALGO
_CONTROL = SourceKind.SNIPPET_CONTROL
_INCLUDE = SourceKind.SNIPPET_INCLUDE
_CLASS = SourceKind.SNIPPET_CLASS

SNIPPETS: dict[str, tuple[SnippetEntry, ...]] = {
    "cpp": (
        SnippetEntry("vector", "std::vector<T>", "std::vector<int> v;", _STL, 9),
        SnippetEntry("map", "std::map<K,V>", "std::map<int, int> m;", _STL, 8),
        SnippetEntry("set", "std::set<T>", "std::set<int> s;", _STL, 8),
        SnippetEntry("queue", "std::queue<T>", "std::queue<int> q;", _STL, 7),
        SnippetEntry("stack", "std::stack<T>", "std::stack<int> st;", _STL, 7),
        SnippetEntry("priority_queue", "Max Heap", "std::priority_queue<int> pq;", _STL, 7),
        SnippetEntry("sort", "Sort container", "std::sort(v.begin(), v.end());", _ALGO, 9),
        SnippetEntry("for", "for loop", "for (int i = 0; i < n; i++) {\n\t\n}", _CONTROL, 9),
        SnippetEntry("#include", "#include <bits/stdc++.h>", "#include <bits/stdc++.h>", _INCLUDE, 10),
    ),
    "java": (
        SnippetEntry("ArrayList", "ArrayList<T>", "ArrayList<Integer> list = new ArrayList<>();", _CLASS, 8),
        SnippetEntry("HashMap", "HashMap<K,V>", "HashMap<Integer, Integer> map = new HashMap<>();", _CLASS, 8),
        SnippetEntry("Scanner", "Scanner input", "Scanner sc = new Scanner(System.in);", _CLASS, 8),
    ),
    "python": (
        SnippetEntry("for", "for i in range(n)", "for i in range(n):\n\t", _CONTROL, 9),
        SnippetEntry("def", "def function()", "def function_name():\n\tpass", _CONTROL, 9),
    ),
}


class SnippetCatalog:
    """Read-only lookup over a language -> snippets table."""

    def __init__(self, table: dict[str, tuple[SnippetEntry, ...]] | None = None) -> None:
        self._table = dict(table if table is not None else SNIPPETS)

    @property
    def languages(self) -> list[str]:
        return sorted(self._table)

    def entries(self, language: str) -> tuple[SnippetEntry, ...]:
        """All snippets for *language*; unknown languages get the C++ table."""
        if language in self._table:
            return self._table[language]
        return self._table.get(DEFAULT_LANGUAGE, ())

    def matching(self, prefix: str, language: str) -> list[SnippetEntry]:
        """Snippets whose token starts with *prefix*, ignoring case."""
        lowered = prefix.lower()
        return [e for e in self.entries(language) if e.token.lower().startswith(lowered)]
