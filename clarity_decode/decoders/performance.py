"""Performance events: network connection info and navigation timing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any

from clarity_decode.decoders.base import DecodedEvent, header
from clarity_decode.protocol import Event, Tokens, field_at

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ConnectionData:
    downlink: float | None
    rtt: int | None
    save_data: int | None
    type: str | None


@dataclass(slots=True)
class NavigationData:
    """Navigation timing entry, fields in wire order."""

    fetch_start: int | None
    connect_start: int | None
    connect_end: int | None
    request_start: int | None
    response_start: int | None
    response_end: int | None
    dom_interactive: int | None
    dom_complete: int | None
    load_event_start: int | None
    load_event_end: int | None
    redirect_count: int | None
    size: int | None
    type: str | None
    protocol: str | None
    encoded_size: int | None
    decoded_size: int | None


def _positional(cls, tokens: Tokens):
    return cls(*(field_at(tokens, 2 + i) for i in range(len(fields(cls)))))


def decode(tokens: Tokens) -> DecodedEvent:
    time, event = header(tokens)
    data: Any = None

    if event == Event.CONNECTION:
        data = _positional(ConnectionData, tokens)
    elif event == Event.NAVIGATION:
        data = _positional(NavigationData, tokens)
    else:
        log.debug("performance: unexpected event %s", event)

    return DecodedEvent(time=time, event=event, data=data)
