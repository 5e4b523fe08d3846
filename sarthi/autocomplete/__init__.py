"""Autocomplete package — prefix index, tokenizer, snippets, merger and engine."""

from sarthi.autocomplete.engine import CompletionEngine
from sarthi.autocomplete.merger import SuggestionMerger
from sarthi.autocomplete.models import Commit, SnippetEntry, SourceKind, Suggestion
from sarthi.autocomplete.snippets import SnippetCatalog
from sarthi.autocomplete.tokenizer import IdentifierTokenizer
from sarthi.autocomplete.trie import PrefixIndex, TrieNode

__all__ = [
    "Commit",
    "CompletionEngine",
    "IdentifierTokenizer",
    "PrefixIndex",
    "SnippetCatalog",
    "SnippetEntry",
    "SourceKind",
    "Suggestion",
    "SuggestionMerger",
    "TrieNode",
]
