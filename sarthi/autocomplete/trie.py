"""
Prefix index over identifiers seen in the current buffer.

Each node maps a character to its child and records how many times a
word ending at that node was inserted.  Queries return every stored word
under a prefix, most frequent first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import msgpack

logger = logging.getLogger(__name__)

# Words shorter than this are never stored
MIN_WORD_LENGTH = 2


@dataclass
class TrieNode:
    """Single node in the trie."""

    children: dict[str, "TrieNode"] = field(default_factory=dict)
    is_terminal: bool = False
    count: int = 0


class PrefixIndex:
    """Frequency-ranked prefix trie, rebuilt wholesale on each tokenization pass."""

    def __init__(self) -> None:
        self._root = TrieNode()
        self._size = 0

    @property
    def size(self) -> int:
        """Number of distinct words stored."""
        return self._size

    def insert(self, word: str) -> None:
        """Insert *word*, bumping its occurrence count if already present."""
        if not word or len(word) < MIN_WORD_LENGTH:
            return

        node = self._root
        for ch in word:
            child = node.children.get(ch)
            if child is None:
                child = TrieNode()
                node.children[ch] = child
            node = child

        if not node.is_terminal:
            self._size += 1
        node.is_terminal = True
        node.count += 1

    def query(self, prefix: str) -> list[str]:
        """
        Return every stored word starting with *prefix*.

        Ordered by descending occurrence count, ties by ascending word.
        An empty or unknown prefix yields an empty list.
        """
        if not prefix:
            return []

        node = self._root
        for ch in prefix:
            node = node.children.get(ch)
            if node is None:
                return []

        found = self._collect(node, prefix)
        found.sort(key=lambda item: (-item[1], item[0]))
        return [word for word, _ in found]

    def count(self, word: str) -> int:
        """Occurrence count for *word*, 0 if it was never inserted."""
        node = self._root
        for ch in word:
            node = node.children.get(ch)
            if node is None:
                return 0
        return node.count if node.is_terminal else 0

    def clear(self) -> None:
        """Drop every stored word."""
        self._root = TrieNode()
        self._size = 0

    @staticmethod
    def _collect(start: TrieNode, prefix: str) -> list[tuple[str, int]]:
        """Iterative DFS over the subtree rooted at *start*."""
        found: list[tuple[str, int]] = []
        stack: list[tuple[TrieNode, str]] = [(start, prefix)]
        while stack:
            node, word = stack.pop()
            if node.is_terminal:
                found.append((word, node.count))
            for ch, child in node.children.items():
                stack.append((child, word + ch))
        return found

    # ---- persistence ----

    def save(self, path: Path) -> None:
        """Serialize the index to a msgpack file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            msgpack.pack(self._serialize(), f)
        logger.info("Saved prefix index (%d words) to %s", self._size, path)

    @classmethod
    def load(cls, path: Path) -> "PrefixIndex":
        """Deserialize an index from a msgpack file."""
        with open(path, "rb") as f:
            data = msgpack.unpack(f, raw=False)
        index = cls()
        index._root = index._deserialize(data)
        index._size = sum(1 for _ in index._collect(index._root, ""))
        logger.info("Loaded prefix index (%d words) from %s", index._size, path)
        return index

    def _serialize(self) -> dict:
        # Built bottom-up from an explicit stack so deep tries don't recurse
        out: dict[int, dict] = {}
        order: list[TrieNode] = []
        stack = [self._root]
        while stack:
            node = stack.pop()
            order.append(node)
            stack.extend(node.children.values())
        for node in reversed(order):
            out[id(node)] = {
                "t": node.is_terminal,
                "n": node.count,
                "c": {ch: out.pop(id(child)) for ch, child in node.children.items()},
            }
        return out[id(self._root)]

    @staticmethod
    def _deserialize(data: dict) -> TrieNode:
        root = TrieNode(is_terminal=data["t"], count=data["n"])
        stack: list[tuple[TrieNode, dict]] = [(root, data)]
        while stack:
            node, raw = stack.pop()
            for ch, child_data in raw["c"].items():
                child = TrieNode(is_terminal=child_data["t"], count=child_data["n"])
                node.children[ch] = child
                stack.append((child, child_data))
        return root
