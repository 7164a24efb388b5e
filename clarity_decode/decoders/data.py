"""Envelope and data-category events (metrics, dimensions, upload bookkeeping).

Token layouts after the ``[time, event]`` header:

    METRIC     [key, value]*
    DIMENSION  [key, [value, ...]]*
    UPLOAD     [sequence, attempts, status]
    UPGRADE    [key]
    BASELINE   [visible, docWidth, docHeight, screenWidth, screenHeight,
                scrollX, scrollY, pointerX, pointerY]
    CUSTOM     [key, value]
    PING       [gap]
    VARIABLE   [name, [value, ...]]*
    LIMIT      [check]
    SUMMARY    [event, [[start, duration], ...]]*
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from clarity_decode.decoders.base import DecodedEvent, as_list, header, keyed, pairs
from clarity_decode.protocol import BooleanFlag, Event, Tokens, Upload, field_at

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Envelope:
    version: str
    sequence: int
    start: int
    duration: int
    project_id: Any
    user_id: Any
    session_id: Any
    page_num: int
    upload: Upload
    end: BooleanFlag


@dataclass(slots=True)
class UploadData:
    sequence: int | None
    attempts: int | None
    status: int | None


@dataclass(slots=True)
class UpgradeData:
    key: str | None


@dataclass(slots=True)
class BaselineData:
    visible: int | None
    doc_width: int | None
    doc_height: int | None
    screen_width: int | None
    screen_height: int | None
    scroll_x: int | None = None
    scroll_y: int | None = None
    pointer_x: int | None = None
    pointer_y: int | None = None


@dataclass(slots=True)
class CustomData:
    key: str | None
    value: Any


@dataclass(slots=True)
class PingData:
    gap: int | None


@dataclass(slots=True)
class LimitData:
    check: int | None


def _flag(enum_cls, value: Any, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


def envelope(tokens: Tokens) -> Envelope:
    """Decode the envelope token ``e``."""
    return Envelope(
        version=str(field_at(tokens, 0, "")),
        sequence=field_at(tokens, 1, 0),
        start=field_at(tokens, 2, 0),
        duration=field_at(tokens, 3, 0),
        project_id=field_at(tokens, 4),
        user_id=field_at(tokens, 5),
        session_id=field_at(tokens, 6),
        page_num=field_at(tokens, 7, 0),
        upload=_flag(Upload, field_at(tokens, 8, 0), Upload.ASYNC),
        end=_flag(BooleanFlag, field_at(tokens, 9, 0), BooleanFlag.FALSE),
    )


def _metric(tokens: Tokens) -> dict[int, Any]:
    return {key: value for key, value in keyed(tokens)}


def _dimension(tokens: Tokens) -> dict[int, list[str]]:
    return {key: as_list(values) for key, values in keyed(tokens)}


def _variable(tokens: Tokens) -> dict[str, list[str]]:
    return {str(name): as_list(values) for name, values in pairs(tokens)}


def _summary(tokens: Tokens) -> dict[int, list[list[Any]]]:
    out: dict[int, list[list[Any]]] = {}
    for event, ranges in keyed(tokens):
        out.setdefault(event, []).extend(as_list(r) for r in as_list(ranges))
    return out


def decode(tokens: Tokens) -> DecodedEvent:
    time, event = header(tokens)
    data: Any = None

    if event == Event.METRIC:
        data = _metric(tokens)
    elif event == Event.DIMENSION:
        data = _dimension(tokens)
    elif event == Event.UPLOAD:
        data = UploadData(
            sequence=field_at(tokens, 2),
            attempts=field_at(tokens, 3),
            status=field_at(tokens, 4),
        )
    elif event == Event.UPGRADE:
        data = UpgradeData(key=field_at(tokens, 2))
    elif event == Event.BASELINE:
        data = BaselineData(*(field_at(tokens, i) for i in range(2, 11)))
    elif event == Event.CUSTOM:
        data = CustomData(key=field_at(tokens, 2), value=field_at(tokens, 3))
    elif event == Event.PING:
        data = PingData(gap=field_at(tokens, 2))
    elif event == Event.VARIABLE:
        data = _variable(tokens)
    elif event == Event.LIMIT:
        data = LimitData(check=field_at(tokens, 2))
    elif event == Event.SUMMARY:
        data = _summary(tokens)
    else:
        log.debug("data: unexpected event %s", event)

    return DecodedEvent(time=time, event=event, data=data)
