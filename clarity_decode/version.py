"""Protocol version parsing and compatibility.

A payload declares the agent version that produced it in its envelope. We
accept it when major and minor match the decoder exactly and the patch level
is within one step either way. The beta suffix (``1.2.3-b7``) is informational.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

VERSION = "0.6.3"

_BETA_DELIMITER = "-b"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_DEFAULT_SAMPLE_CHARS = 250


@dataclass(frozen=True, slots=True)
class DecodedVersion:
    major: int = 0
    minor: int = 0
    patch: int = 0
    beta: int = 0

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}{_BETA_DELIMITER}{self.beta}" if self.beta else base


ZERO_VERSION = DecodedVersion()


class VersionMismatch(ValueError):
    """Payload was produced by an agent this decoder can't read."""

    def __init__(
        self, actual: str, expected: str, raw: str, *, sample_chars: int = _DEFAULT_SAMPLE_CHARS
    ) -> None:
        self.actual = actual
        self.expected = expected
        self.sample = raw[:sample_chars]
        super().__init__(
            f"Invalid version. Actual: {actual} | Expected: {expected} (+/- 1) | {self.sample}"
        )


def _leading_int(text: str) -> int | None:
    m = _LEADING_INT.match(text)
    return int(m.group(1)) if m else None


def parse_version(ver: str) -> DecodedVersion:
    """Parse ``major.minor.patch[-bN]``.

    Anything that isn't exactly three dot-separated parts, or whose
    major/minor/patch has no leading integer, parses to ``0.0.0``.
    """
    parts = ver.split(".") if isinstance(ver, str) else []
    if len(parts) != 3:
        return ZERO_VERSION

    subparts = parts[2].split(_BETA_DELIMITER)
    if len(subparts) == 2:
        patch, beta = _leading_int(subparts[0]), _leading_int(subparts[1])
    else:
        patch, beta = _leading_int(parts[2]), 0

    major, minor = _leading_int(parts[0]), _leading_int(parts[1])
    if major is None or minor is None or patch is None:
        return ZERO_VERSION
    return DecodedVersion(major=major, minor=minor, patch=patch, beta=beta or 0)


def is_compatible(incoming: DecodedVersion, running: DecodedVersion) -> bool:
    # 0.0.0 against a zeroed running version passes; kept for producers that rely on it.
    return (
        incoming.major == running.major
        and incoming.minor == running.minor
        and abs(incoming.patch - running.patch) <= 1
    )


def check_version(
    actual: str, expected: str, raw: str, *, sample_chars: int = _DEFAULT_SAMPLE_CHARS
) -> None:
    """Raise ``VersionMismatch`` unless ``actual`` is readable by ``expected``."""
    if not is_compatible(parse_version(actual), parse_version(expected)):
        raise VersionMismatch(actual, expected, raw, sample_chars=sample_chars)
