"""Diagnostic events reported by the agent about the page and itself.

    SCRIPT_ERROR  [message, line, column, stack, source]
    IMAGE_ERROR   [source, target]
    LOG           [code, severity, name, message, stack]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from clarity_decode.decoders.base import DecodedEvent, header
from clarity_decode.protocol import Code, Event, Severity, Tokens, field_at

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ScriptErrorData:
    message: str | None
    line: int | None
    column: int | None
    stack: str | None
    source: str | None


@dataclass(slots=True)
class ImageErrorData:
    source: str | None
    target: int | None


@dataclass(slots=True)
class LogData:
    code: Code | int | None
    severity: Severity | int | None
    name: str | None
    message: str | None
    stack: str | None


def _enum_or_raw(enum_cls, value: Any) -> Any:
    if isinstance(value, int) and value in enum_cls._value2member_map_:
        return enum_cls(value)
    return value


def decode(tokens: Tokens) -> DecodedEvent:
    time, event = header(tokens)
    data: Any = None

    if event == Event.SCRIPT_ERROR:
        data = ScriptErrorData(*(field_at(tokens, i) for i in range(2, 7)))
    elif event == Event.IMAGE_ERROR:
        data = ImageErrorData(source=field_at(tokens, 2), target=field_at(tokens, 3))
    elif event == Event.LOG:
        data = LogData(
            code=_enum_or_raw(Code, field_at(tokens, 2)),
            severity=_enum_or_raw(Severity, field_at(tokens, 3)),
            name=field_at(tokens, 4),
            message=field_at(tokens, 5),
            stack=field_at(tokens, 6),
        )
    else:
        log.debug("diagnostic: unexpected event %s", event)

    return DecodedEvent(time=time, event=event, data=data)
