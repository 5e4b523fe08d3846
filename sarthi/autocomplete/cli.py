"""Autocomplete CLI — index a source file and/or query suggestions offline."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from sarthi.autocomplete.merger import SuggestionMerger
from sarthi.autocomplete.tokenizer import IdentifierTokenizer
from sarthi.autocomplete.trie import PrefixIndex
from sarthi.config.logging_config import setup_logging
from sarthi.config.settings import get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Autocomplete tools.")
    sub = parser.add_subparsers(dest="command")

    index = sub.add_parser("index", help="Tokenize a source file into a prefix index.")
    index.add_argument("source", type=Path, help="Source file to tokenize.")
    index.add_argument("--language", default=None, help="Language of the source (default: cpp).")
    index.add_argument("--out", type=Path, default=None, help="Where to save the index.")

    query = sub.add_parser("query", help="Query local + static suggestions.")
    query.add_argument("prefix", help="Prefix to complete.")
    query.add_argument("--index", type=Path, default=None, help="Saved index to use.")
    query.add_argument("--language", default=None, help="Snippet language (default: cpp).")

    return parser


def main() -> int:
    args = build_parser().parse_args()

    settings = get_settings()
    setup_logging(settings)
    language = getattr(args, "language", None) or settings.completion.default_language

    if args.command == "index":
        index = PrefixIndex()
        text = args.source.read_text(encoding="utf-8", errors="replace")
        inserted = IdentifierTokenizer().rebuild(text, language, index)
        out = args.out or settings.indexes_dir / f"{args.source.stem}.msgpack"
        index.save(out)
        print(json.dumps({
            "source": str(args.source),
            "language": language,
            "tokens": inserted,
            "distinct": index.size,
            "file_path": str(out),
        }, indent=2))

    elif args.command == "query":
        index = PrefixIndex.load(args.index) if args.index else PrefixIndex()
        merger = SuggestionMerger(max_suggestions=settings.completion.max_suggestions)
        for s in merger.merge(args.prefix, [], index.query(args.prefix), language):
            print(f"  {s.priority:3d}  {s.label:<10} {s.text}")

    else:
        build_parser().print_help()
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
