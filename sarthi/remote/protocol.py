"""
Wire format spoken with the suggestion backend.

Outbound frames are JSON objects tagged with ``kind``.  Inbound frames are
interpreted permissively: the backend may answer with a bare list or nest
the list under one of several field names.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

# A suggestion as received: a bare string or an object carrying its text
SuggestionEntry = Union[str, dict]

# Checked in this order; the first key holding a usable value wins
BATCH_FIELDS = ("suggestions", "data", "results")
TEXT_FIELDS = ("text", "t")

NORMAL_CLOSURE = 1000
ABNORMAL_CLOSURE = 1006


class MalformedPayloadError(ValueError):
    """Inbound frame that could not be decoded."""


class MessageKind(str, Enum):
    PONG = "pong"
    ERROR = "error"
    BATCH = "batch"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class InboundMessage:
    """Decoded inbound frame."""

    kind: MessageKind
    suggestions: tuple[SuggestionEntry, ...] = field(default_factory=tuple)
    error: Optional[str] = None


def encode_search(word: str, language: str, timestamp: Optional[int] = None) -> str:
    """Search request; *timestamp* is epoch milliseconds, defaulting to now."""
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return json.dumps({
        "kind": "search",
        "word": word,
        "language": language,
        "timestamp": timestamp,
    })


def encode_ping() -> str:
    return json.dumps({"kind": "ping"})


def _is_set(value: Any) -> bool:
    # Empty containers count as set; null, false, zero and "" do not
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    return True


def _tag(data: dict) -> Any:
    # Older backends tag frames with "type" rather than "kind"
    return data.get("kind", data.get("type"))


def parse_inbound(raw: Union[str, bytes]) -> InboundMessage:
    """
    Decode one inbound frame.

    Raises MalformedPayloadError if *raw* is not valid JSON.  Anything that
    parses but has no recognizable suggestion list comes back as
    ``UNRECOGNIZED``; an empty list comes back as an empty ``BATCH``.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedPayloadError(str(exc)) from exc

    if isinstance(data, dict):
        tag = _tag(data)
        if tag == "pong":
            return InboundMessage(MessageKind.PONG)
        if tag == "error":
            message = data.get("message") or data.get("error")
            return InboundMessage(MessageKind.ERROR, error=str(message) if message else None)

    results: Any = None
    if isinstance(data, list):
        results = data
    elif isinstance(data, dict):
        for name in BATCH_FIELDS:
            if _is_set(data.get(name)):
                results = data[name]
                break

    if not isinstance(results, list):
        return InboundMessage(MessageKind.UNRECOGNIZED)
    return InboundMessage(MessageKind.BATCH, suggestions=tuple(results))


def entry_text(entry: Any) -> Optional[str]:
    """Display text of a suggestion entry, or None if it has none."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        for name in TEXT_FIELDS:
            value = entry.get(name)
            if isinstance(value, str) and value:
                return value
    return None
