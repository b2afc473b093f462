"""JSON helpers for reply payloads."""

from __future__ import annotations

import json
import typing as t

from .errors import SerializationError

JsonValue = t.Any


def payload_to_json(payload: bytes) -> JsonValue:
    """Decode a reply payload, raising :class:`SerializationError` on bad JSON."""
    try:
        return json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = f"malformed JSON reply: {payload[:80]!r}"
        raise SerializationError(msg) from exc


def preorder(
    value: JsonValue, visitor: t.Callable[[JsonValue], JsonValue | None]
) -> JsonValue | None:
    """Visit *value* depth-first, returning the first non-``None`` visitor result."""
    stack = [value]
    while stack:
        node = stack.pop()
        if (found := visitor(node)) is not None:
            return found
        if isinstance(node, dict):
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, list):
            stack.extend(reversed(node))
    return None


def _focused(node: JsonValue) -> JsonValue | None:
    if isinstance(node, dict) and node.get("focused") is True:
        return node
    return None


def find_focused(value: JsonValue) -> JsonValue | None:
    """Return the first node with ``"focused": true`` in a tree or list."""
    return preorder(value, _focused)


__all__ = ["JsonValue", "find_focused", "payload_to_json", "preorder"]
