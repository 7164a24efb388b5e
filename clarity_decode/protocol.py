"""Clarity wire format: event codes and keyed enums.

Every event travels as a positional token::

    [time:int] [event:int] [field:N ...]

Fields after the header are category specific (numbers, strings, or nested
lists). A payload groups an envelope token with two event channels::

    {"e": Token, "a": Token[], "p"?: Token[]}

``a`` carries events sent as soon as they happen, ``p`` carries events the
agent queued internally before upload.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

Tokens = list[Any]


# -- Event type codes (token index 1) ----------------------------------------


class Event(IntEnum):
    METRIC = 0
    DIMENSION = 1
    UPLOAD = 2
    UPGRADE = 3
    BASELINE = 4
    TIMELINE = 5
    DISCOVER = 6
    MUTATION = 7
    REGION = 8
    DOCUMENT = 9
    CLICK = 10
    SCROLL = 11
    RESIZE = 12
    MOUSE_MOVE = 13
    MOUSE_DOWN = 14
    MOUSE_UP = 15
    MOUSE_WHEEL = 16
    DOUBLE_CLICK = 17
    TOUCH_START = 18
    TOUCH_END = 19
    TOUCH_MOVE = 20
    TOUCH_CANCEL = 21
    SELECTION = 22
    PAGE = 23
    CUSTOM = 24
    PING = 25
    UNLOAD = 26
    INPUT = 27
    VISIBILITY = 28
    NAVIGATION = 29
    CONNECTION = 30
    SCRIPT_ERROR = 31
    IMAGE_ERROR = 32
    LOG = 33
    VARIABLE = 34
    LIMIT = 35
    SUMMARY = 36
    BOX = 37


POINTER_EVENTS = frozenset(
    {
        Event.MOUSE_MOVE,
        Event.MOUSE_DOWN,
        Event.MOUSE_UP,
        Event.MOUSE_WHEEL,
        Event.DOUBLE_CLICK,
        Event.TOUCH_START,
        Event.TOUCH_END,
        Event.TOUCH_MOVE,
        Event.TOUCH_CANCEL,
    }
)


# -- Keys inside metric / dimension events -----------------------------------


class Metric(IntEnum):
    CLIENT_TIMESTAMP = 0
    PLAYBACK = 1
    TOTAL_BYTES = 2
    LAYOUT_COST = 3
    TOTAL_COST = 4
    INVOKE_COUNT = 5
    THREAD_BLOCKED_TIME = 6
    LONG_TASK_COUNT = 7
    LARGEST_PAINT = 8
    CUMULATIVE_LAYOUT_SHIFT = 9
    FIRST_INPUT_DELAY = 10


class Dimension(IntEnum):
    USER_AGENT = 0
    URL = 1
    REFERRER = 2
    PAGE_TITLE = 3
    NETWORK_HOSTS = 4
    TAGS = 5


# -- Diagnostic codes --------------------------------------------------------


class Code(IntEnum):
    RUN_TASK = 0
    CSS_RULES = 1
    MUTATION_OBSERVER = 2
    PERFORMANCE_OBSERVER = 3


class Severity(IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2
    FATAL = 3


# -- Envelope flags ----------------------------------------------------------


class Upload(IntEnum):
    ASYNC = 0
    BEACON = 1


class BooleanFlag(IntEnum):
    FALSE = 0
    TRUE = 1


def field_at(tokens: Tokens, index: int, default: Any = None) -> Any:
    """Positional read that tolerates short tokens and non-list values."""
    if isinstance(tokens, list) and 0 <= index < len(tokens):
        return tokens[index]
    return default


def event_time(tokens: Tokens) -> int | float | None:
    """Return the timestamp at index 0, or None when it isn't a number."""
    head = field_at(tokens, 0)
    if isinstance(head, bool) or not isinstance(head, (int, float)):
        return None
    return head


def event_code(tokens: Tokens) -> int | None:
    """Return the event code at index 1, or None when the token has none.

    JSON encoders may write an integral code as ``10.0``; that reads as 10.
    """
    code = field_at(tokens, 1)
    if isinstance(code, bool):
        return None
    if isinstance(code, float) and code.is_integer():
        return int(code)
    if not isinstance(code, int):
        return None
    return code
