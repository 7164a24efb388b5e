"""Decoded output: envelope plus sparse, lazily created event buckets."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, is_dataclass
from enum import Enum
from typing import Any

from clarity_decode.decoders.base import DecodedEvent
from clarity_decode.decoders.data import Envelope


@dataclass(slots=True)
class DecodedPayload:
    """One decoded upload.

    ``events`` only holds buckets that received at least one event, so an
    absent bucket and an empty one are never confused.
    """

    timestamp: int
    envelope: Envelope
    events: dict[str, list[DecodedEvent]] = field(default_factory=dict)

    def append(self, bucket: str, value: DecodedEvent) -> None:
        """Add ``value`` to ``bucket``, creating the bucket on first write."""
        self.events.setdefault(bucket, []).append(value)

    def get(self, bucket: str) -> list[DecodedEvent] | None:
        return self.events.get(bucket)

    def __contains__(self, bucket: object) -> bool:
        return bucket in self.events

    @property
    def buckets(self) -> list[str]:
        return list(self.events)

    # ── Serialisation ────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Flat output object: ``{timestamp, envelope, <bucket>...}``."""
        d: dict[str, Any] = {
            "timestamp": self.timestamp,
            "envelope": _plain(asdict(self.envelope)),
        }
        for bucket, entries in self.events.items():
            d[bucket] = [_plain(asdict(e)) for e in entries]
        return d

    def to_line(self, *, indent: int | None = None) -> str:
        """Serialise to JSON (one line unless ``indent`` is given)."""
        separators = (",", ":") if indent is None else None
        return json.dumps(self.to_dict(), indent=indent, separators=separators)


def _plain(value: Any) -> Any:
    """Make decoded values JSON friendly: enums to ints, mapping keys to str."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value):
        return _plain(asdict(value))
    if isinstance(value, dict):
        return {str(_plain(k)): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value
