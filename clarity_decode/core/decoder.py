"""Top-level decode: raw upload string in, ``DecodedPayload`` out.

Stages, in order:
    parse -> envelope + merge -> version check -> reset layout -> dispatch

A parse failure or version mismatch raises before any bucket exists; an
unknown event code is logged and skipped.
"""

from __future__ import annotations

import logging
import time

from clarity_decode.core.dispatcher import (
    DATA,
    DIAGNOSTIC,
    INTERACTION,
    LAYOUT,
    PERFORMANCE,
    Dispatcher,
)
from clarity_decode.core.merge import merge
from clarity_decode.core.payload import DecodedPayload
from clarity_decode.decoders import data, diagnostic, interaction, performance
from clarity_decode.decoders.layout import LayoutDecoder
from clarity_decode.version import VERSION, check_version
from clarity_decode.wire import parse_payload

log = logging.getLogger(__name__)

DEFAULT_SAMPLE_CHARS = 250


def utf16_length(raw: str) -> int:
    """Length of ``raw`` in UTF-16 code units, the unit the agent measures in.

    Characters outside the BMP count twice.
    """
    return len(raw.encode("utf-16-le", "surrogatepass")) // 2


class Decoder:
    """Decodes uploads against one running protocol version.

    Holds the layout decoder's node table between calls; decode one upload
    at a time per instance.
    """

    def __init__(self, version: str = VERSION, *, sample_chars: int = DEFAULT_SAMPLE_CHARS) -> None:
        self.version = version
        self._sample_chars = sample_chars
        self._layout = LayoutDecoder()
        self._dispatcher = Dispatcher(
            {
                DATA: data.decode,
                INTERACTION: interaction.decode,
                LAYOUT: self._layout.decode,
                DIAGNOSTIC: diagnostic.decode,
                PERFORMANCE: performance.decode,
            }
        )

    @property
    def layout(self) -> LayoutDecoder:
        return self._layout

    def decode(self, raw: str | bytes) -> DecodedPayload:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        wire = parse_payload(raw)

        envelope = data.envelope(wire.e)
        payload = DecodedPayload(timestamp=int(time.time() * 1000), envelope=envelope)
        encoded = merge(wire.a, wire.p)

        check_version(envelope.version, self.version, raw, sample_chars=self._sample_chars)

        self._layout.reset()

        count = self._dispatcher.dispatch(encoded, payload, utf16_length(raw))
        log.debug(
            "decoded payload %s/%s/%s: %d events in %d buckets",
            envelope.session_id,
            envelope.page_num,
            envelope.sequence,
            count,
            len(payload.events),
        )
        return payload


_default: Decoder | None = None


def decode(raw: str | bytes) -> DecodedPayload:
    """Decode with a process-wide ``Decoder`` at the built-in version."""
    global _default
    if _default is None:
        _default = Decoder()
    return _default.decode(raw)
