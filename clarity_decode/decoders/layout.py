"""Layout events: DOM discovery/mutation, regions, document size, boxes.

DOM tokens (DISCOVER, MUTATION) carry one group per node::

    [id] [parent]? [next]? [tag] ["key=value" | text]*

A group starts at the first number after a run of strings. Strings that come
before any id belong to no node and are dropped. A nested ``[i]``
stands for the string at index ``i`` of the same token, which lets the agent
send repeated tags and attribute values once.

The decoder remembers id -> (tag, parent) for the nodes it has seen so a
mutation that only re-sends an id and new attributes still resolves its
parent and tag. That table is owned by the caller and cleared with ``reset()``.

    REGION    [id, name]*
    DOCUMENT  [width, height]
    BOX       [id, width, height]*
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from clarity_decode.decoders.base import DecodedEvent, header, pairs
from clarity_decode.protocol import Event, Tokens, field_at

log = logging.getLogger(__name__)

TEXT_TAG = "*T"


@dataclass(slots=True)
class DomData:
    id: int
    parent: int | None
    next: int | None
    tag: str | None
    attributes: dict[str, str] = field(default_factory=dict)
    text: str | None = None


@dataclass(slots=True)
class RegionData:
    id: int
    name: str | None


@dataclass(slots=True)
class DocumentData:
    width: int | None
    height: int | None


@dataclass(slots=True)
class BoxData:
    id: int
    width: int | None
    height: int | None


@dataclass(slots=True)
class _NodeInfo:
    tag: str | None
    parent: int | None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class LayoutDecoder:
    """Stateful decoder for layout tokens. Not reentrant."""

    def __init__(self) -> None:
        self._nodes: dict[int, _NodeInfo] = {}

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    def reset(self) -> None:
        self._nodes.clear()

    def decode(self, tokens: Tokens) -> DecodedEvent:
        time, event = header(tokens)
        data: Any = None

        if event in (Event.DISCOVER, Event.MUTATION):
            data = self._dom(tokens)
        elif event == Event.REGION:
            data = [RegionData(id=rid, name=name) for rid, name in pairs(tokens)]
        elif event == Event.DOCUMENT:
            data = DocumentData(width=field_at(tokens, 2), height=field_at(tokens, 3))
        elif event == Event.BOX:
            body = tokens[2:]
            data = [
                BoxData(id=body[i], width=body[i + 1], height=body[i + 2])
                for i in range(0, len(body) - 2, 3)
            ]
        else:
            log.debug("layout: unexpected event %s", event)

        return DecodedEvent(time=time, event=event, data=data)

    # -- DOM groups -----------------------------------------------------------

    def _dom(self, tokens: Tokens) -> list[DomData]:
        nodes: list[DomData] = []
        numbers: list[Any] = []
        strings: list[str] = []

        for token in tokens[2:]:
            if _is_number(token):
                if strings:
                    # Strings ahead of the first id have no node to attach to.
                    if numbers:
                        nodes.append(self._node(numbers, strings))
                    numbers, strings = [], []
                numbers.append(token)
            elif isinstance(token, str):
                strings.append(token)
            elif isinstance(token, list):
                ref = self._reference(tokens, token)
                if ref is not None:
                    strings.append(ref)

        if numbers:
            nodes.append(self._node(numbers, strings))
        return nodes

    @staticmethod
    def _reference(tokens: Tokens, token: list) -> str | None:
        index = field_at(token, 0)
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        value = field_at(tokens, index)
        return value if isinstance(value, str) else None

    def _node(self, numbers: list[Any], strings: list[str]) -> DomData:
        node_id = numbers[0]
        known = self._nodes.get(node_id)

        parent = numbers[1] if len(numbers) > 1 else (known.parent if known else None)
        next_id = numbers[2] if len(numbers) > 2 else None
        tag = strings[0] if strings else (known.tag if known else None)

        attributes: dict[str, str] = {}
        text = None
        rest = strings[1:]
        if tag == TEXT_TAG:
            text = "".join(rest)
        else:
            for item in rest:
                key, sep, value = item.partition("=")
                attributes[key] = value if sep else ""

        self._nodes[node_id] = _NodeInfo(tag=tag, parent=parent)
        return DomData(
            id=node_id,
            parent=parent,
            next=next_id,
            tag=tag,
            attributes=attributes,
            text=text,
        )
