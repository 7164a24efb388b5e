"""Shared shape for decoded events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from clarity_decode.protocol import Tokens, event_code, field_at


@dataclass(slots=True)
class DecodedEvent:
    time: int
    event: int
    data: Any


CategoryDecoder = Callable[[Tokens], DecodedEvent]


def header(tokens: Tokens) -> tuple[int, int]:
    code = event_code(tokens)
    return field_at(tokens, 0, 0), -1 if code is None else code


def pairs(tokens: Tokens, start: int = 2) -> list[tuple[Any, Any]]:
    """Group ``tokens[start:]`` into key/value pairs, dropping a dangling key."""
    body = tokens[start:]
    return [(body[i], body[i + 1]) for i in range(0, len(body) - 1, 2)]


def as_list(value: Any) -> list:
    if value is None:
        return []
    return list(value) if isinstance(value, list) else [value]


def keyed(tokens: Tokens, start: int = 2) -> list[tuple[Any, Any]]:
    """Like ``pairs`` but skips pairs whose key can't be a mapping key."""
    return [(k, v) for k, v in pairs(tokens, start) if not isinstance(k, (list, dict))]
