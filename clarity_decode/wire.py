"""Pydantic model for the raw upload document."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError


class PayloadError(ValueError):
    """Raw input is not valid JSON or not shaped like an upload."""


class WirePayload(BaseModel):
    """``{"e": envelope, "a": events, "p"?: queued events}``.

    Event tokens are left unchecked here. One with no usable timestamp or
    code is a dispatch miss, not a reason to drop the whole upload.
    """

    e: list[Any]
    a: list[Any]
    p: list[Any] | None = None


def parse_payload(raw: str | bytes) -> WirePayload:
    """Parse a raw upload. Raises ``PayloadError`` on malformed input."""
    try:
        return WirePayload.model_validate_json(raw)
    except ValidationError as e:
        raise PayloadError(f"malformed payload: {e}") from e
