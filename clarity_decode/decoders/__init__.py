"""Per-category token decoders."""

from clarity_decode.decoders.base import CategoryDecoder, DecodedEvent

__all__ = ["CategoryDecoder", "DecodedEvent"]
