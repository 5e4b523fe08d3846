"""
Identifier tokenizer.

Pulls identifier-shaped tokens out of raw source text, drops language
keywords, and feeds the survivors into a PrefixIndex.
"""

from __future__ import annotations

import logging
import re

from sarthi.autocomplete.trie import MIN_WORD_LENGTH, PrefixIndex

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"\b[A-Za-z_][A-Za-z0-9_]*\b", re.ASCII)
_NUMERIC_RE = re.compile(r"^\d+$")

DEFAULT_LANGUAGE = "cpp"

# Case-sensitive keyword tables. For C++ the common STL container names are
# listed too, since the snippet catalog already offers them.
RESERVED_WORDS: dict[str, frozenset[str]] = {
    "cpp": frozenset({
        "int", "float", "double", "char", "void", "bool", "long", "short",
        "if", "else", "for", "while", "do", "switch", "case", "break",
        "continue", "return", "class", "struct", "public", "private",
        "protected", "namespace", "using", "const", "static", "auto",
        "vector", "map", "set", "queue", "stack", "string", "pair",
    }),
    "java": frozenset({
        "int", "float", "double", "char", "void", "boolean", "long", "short",
        "if", "else", "for", "while", "do", "switch", "case", "break",
        "continue", "return", "class", "interface", "extends", "implements",
        "public", "private", "protected", "static", "final", "abstract",
    }),
    "python": frozenset({
        "if", "else", "elif", "for", "while", "def", "class", "return",
        "import", "from", "as", "try", "except", "finally", "with",
        "lambda", "pass", "break", "continue", "True", "False", "None",
    }),
}


def reserved_words(language: str) -> frozenset[str]:
    """Keyword set for *language*, falling back to the C++ table."""
    return RESERVED_WORDS.get(language, RESERVED_WORDS[DEFAULT_LANGUAGE])


class IdentifierTokenizer:
    """Extract identifiers from source text into a PrefixIndex."""

    def tokens(self, source_text: str, language: str) -> list[str]:
        """Return the identifiers in *source_text* that are worth suggesting, in order."""
        keywords = reserved_words(language)
        return [
            token
            for token in _IDENTIFIER_RE.findall(source_text)
            if len(token) >= MIN_WORD_LENGTH
            and not _NUMERIC_RE.match(token)
            and token not in keywords
        ]

    def extract_identifiers(
        self,
        source_text: str,
        language: str,
        index: PrefixIndex,
    ) -> int:
        """
        Insert every identifier in *source_text* into *index*.

        Repeated identifiers are inserted repeatedly so their counts grow.
        The caller is expected to have cleared the index.  Returns the
        number of tokens inserted.
        """
        tokens = self.tokens(source_text, language)
        for token in tokens:
            index.insert(token)
        return len(tokens)

    def rebuild(self, source_text: str, language: str, index: PrefixIndex) -> int:
        """Clear *index* and repopulate it from *source_text*."""
        if not source_text:
            return 0
        index.clear()
        inserted = self.extract_identifiers(source_text, language, index)
        logger.debug(
            "Re-tokenized buffer (%s): %d tokens, %d distinct",
            language, inserted, index.size,
        )
        return inserted
