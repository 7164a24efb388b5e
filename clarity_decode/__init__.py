"""Decoder for Clarity telemetry uploads."""

from clarity_decode.core.decoder import Decoder, decode
from clarity_decode.core.payload import DecodedPayload
from clarity_decode.version import VERSION, VersionMismatch
from clarity_decode.wire import PayloadError

__all__ = [
    "VERSION",
    "DecodedPayload",
    "Decoder",
    "PayloadError",
    "VersionMismatch",
    "decode",
]
