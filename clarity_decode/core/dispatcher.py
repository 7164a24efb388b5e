"""Route event tokens to category decoders and output buckets.

``EVENT_ROUTES`` is the single table of which codes are understood. Several
codes can share a bucket (every pointer/touch code lands in ``pointer``, both
DOM codes in ``dom``). A code missing from the table is logged and skipped,
and so is a token with no numeric timestamp or code.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping

from clarity_decode.core.payload import DecodedPayload
from clarity_decode.decoders.base import CategoryDecoder, DecodedEvent
from clarity_decode.protocol import (
    POINTER_EVENTS,
    Event,
    Metric,
    Tokens,
    event_code,
    event_time,
)

log = logging.getLogger(__name__)

DATA = "data"
INTERACTION = "interaction"
LAYOUT = "layout"
DIAGNOSTIC = "diagnostic"
PERFORMANCE = "performance"

CATEGORIES = (DATA, INTERACTION, LAYOUT, DIAGNOSTIC, PERFORMANCE)

METRIC_BUCKET = "metric"

# code -> (category, bucket)
EVENT_ROUTES: dict[int, tuple[str, str]] = {
    # Data
    Event.METRIC: (DATA, METRIC_BUCKET),
    Event.DIMENSION: (DATA, "dimension"),
    Event.UPLOAD: (DATA, "upload"),
    Event.UPGRADE: (DATA, "upgrade"),
    Event.BASELINE: (DATA, "baseline"),
    Event.CUSTOM: (DATA, "custom"),
    Event.PING: (DATA, "ping"),
    Event.VARIABLE: (DATA, "variable"),
    Event.LIMIT: (DATA, "limit"),
    Event.SUMMARY: (DATA, "summary"),
    # Interaction
    **{code: (INTERACTION, "pointer") for code in POINTER_EVENTS},
    Event.CLICK: (INTERACTION, "click"),
    Event.SCROLL: (INTERACTION, "scroll"),
    Event.RESIZE: (INTERACTION, "resize"),
    Event.SELECTION: (INTERACTION, "selection"),
    Event.TIMELINE: (INTERACTION, "timeline"),
    Event.INPUT: (INTERACTION, "input"),
    Event.UNLOAD: (INTERACTION, "unload"),
    Event.VISIBILITY: (INTERACTION, "visibility"),
    # Layout
    Event.DISCOVER: (LAYOUT, "dom"),
    Event.MUTATION: (LAYOUT, "dom"),
    Event.REGION: (LAYOUT, "region"),
    Event.DOCUMENT: (LAYOUT, "doc"),
    Event.BOX: (LAYOUT, "box"),
    # Diagnostic
    Event.SCRIPT_ERROR: (DIAGNOSTIC, "script"),
    Event.IMAGE_ERROR: (DIAGNOSTIC, "image"),
    Event.LOG: (DIAGNOSTIC, "log"),
    # Performance
    Event.CONNECTION: (PERFORMANCE, "connection"),
    Event.NAVIGATION: (PERFORMANCE, "navigation"),
}


def patch_metric(event: DecodedEvent, raw_length: int) -> DecodedEvent:
    """Stamp the size of the payload being decoded onto a metric event.

    The agent can't know the serialized size of the upload it is writing
    into, so the value it sends lags one upload behind.
    """
    event.data[Metric.TOTAL_BYTES] = raw_length
    return event


class Dispatcher:
    """Resolves ``EVENT_ROUTES`` against concrete decoders once."""

    def __init__(
        self,
        handlers: Mapping[str, CategoryDecoder],
        routes: Mapping[int, tuple[str, str]] = EVENT_ROUTES,
    ) -> None:
        missing = {category for category, _ in routes.values()} - set(handlers)
        if missing:
            raise ValueError(f"no decoder for categories: {sorted(missing)}")
        self._table: dict[int, tuple[CategoryDecoder, str]] = {
            int(code): (handlers[category], bucket)
            for code, (category, bucket) in routes.items()
        }

    def dispatch(
        self, tokens: Iterable[Tokens], payload: DecodedPayload, raw_length: int
    ) -> int:
        """Decode ``tokens`` in order into ``payload``. Returns events decoded."""
        decoded = 0
        for entry in tokens:
            code = event_code(entry)
            route = None
            if code is not None and event_time(entry) is not None:
                route = self._table.get(code)
            if route is None:
                log.error("no handler for event: %s", json.dumps(entry))
                continue

            decoder, bucket = route
            event = decoder(entry)
            if bucket == METRIC_BUCKET:
                event = patch_metric(event, raw_length)
            payload.append(bucket, event)
            decoded += 1
        return decoded
