"""Merge the immediate and queued event channels into one timeline.

Events in ``a`` go out as soon as they happen; events in ``p`` (scroll, for
one) are buffered by the agent first, so the two channels overlap in time.
"""

from __future__ import annotations

from typing import Any

from clarity_decode.protocol import Tokens, event_time


def timestamp(tokens: Any) -> int | float:
    """Sort key for a token: its numeric head, or 0 when it has none."""
    time = event_time(tokens)
    return 0 if time is None else time


def merge(primary: list[Tokens], secondary: list[Tokens] | None = None) -> list[Tokens]:
    """Stable ascending sort of ``primary + secondary`` by timestamp.

    Ties keep their channel order, primary before secondary. Tokens without
    a numeric timestamp sort as 0 and are left for the dispatcher to reject.
    """
    combined = primary + secondary if secondary else list(primary)
    # sorted() is guaranteed stable.
    return sorted(combined, key=timestamp)
