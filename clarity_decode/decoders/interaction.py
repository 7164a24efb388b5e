"""Interaction events: pointer, click, scroll, resize, selection, input, ...

Token layouts after the ``[time, event]`` header:

    pointer    [target, x, y]
    CLICK      [target, x, y, eX, eY, button, reaction, context, text, link, hash]
    SCROLL     [target, x, y]
    RESIZE     [width, height]
    SELECTION  [start, startOffset, end, endOffset]
    TIMELINE   [type, hash, x, y, reaction, context]
    INPUT      [target, value]
    UNLOAD     [name]
    VISIBILITY [visible]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any

from clarity_decode.decoders.base import DecodedEvent, header
from clarity_decode.protocol import POINTER_EVENTS, Event, Tokens, field_at

log = logging.getLogger(__name__)


@dataclass(slots=True)
class PointerData:
    target: int | None
    x: int | None
    y: int | None


@dataclass(slots=True)
class ClickData:
    target: int | None
    x: int | None
    y: int | None
    e_x: int | None
    e_y: int | None
    button: int | None
    reaction: int | None
    context: int | None
    text: str | None
    link: str | None
    hash: str | None


@dataclass(slots=True)
class ScrollData:
    target: int | None
    x: int | None
    y: int | None


@dataclass(slots=True)
class ResizeData:
    width: int | None
    height: int | None


@dataclass(slots=True)
class SelectionData:
    start: int | None
    start_offset: int | None
    end: int | None
    end_offset: int | None


@dataclass(slots=True)
class TimelineData:
    type: int | None
    hash: str | None
    x: int | None
    y: int | None
    reaction: int | None
    context: int | None


@dataclass(slots=True)
class InputData:
    target: int | None
    value: str | None


@dataclass(slots=True)
class UnloadData:
    name: str | None


@dataclass(slots=True)
class VisibilityData:
    visible: str | None


_LAYOUTS: dict[int, type] = {
    Event.CLICK: ClickData,
    Event.SCROLL: ScrollData,
    Event.RESIZE: ResizeData,
    Event.SELECTION: SelectionData,
    Event.TIMELINE: TimelineData,
    Event.INPUT: InputData,
    Event.UNLOAD: UnloadData,
    Event.VISIBILITY: VisibilityData,
}
_LAYOUTS.update({code: PointerData for code in POINTER_EVENTS})


def decode(tokens: Tokens) -> DecodedEvent:
    time, event = header(tokens)
    data: Any = None

    cls = _LAYOUTS.get(event)
    if cls is not None:
        # Every field is positional and optional, in declaration order.
        data = cls(*(field_at(tokens, 2 + i) for i in range(len(fields(cls)))))
    else:
        log.debug("interaction: unexpected event %s", event)

    return DecodedEvent(time=time, event=event, data=data)
