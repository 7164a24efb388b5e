"""clarity-decode configuration with defaults, loadable from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from clarity_decode.version import VERSION

log = logging.getLogger(__name__)

_SECTIONS = ("decoder", "logging", "output", "server")


@dataclass
class DecoderSection:
    version: str = VERSION  # running protocol version payloads are checked against
    sample_chars: int = 250  # raw input echoed in version-mismatch errors


@dataclass
class LoggingSection:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-5s %(name)s: %(message)s"


@dataclass
class OutputSection:
    indent: int | None = None  # None: one compact JSON line per payload


@dataclass
class ServerSection:
    host: str = "127.0.0.1"
    port: int = 8200


@dataclass
class DecodeConfig:
    decoder: DecoderSection = field(default_factory=DecoderSection)
    logging: LoggingSection = field(default_factory=LoggingSection)
    output: OutputSection = field(default_factory=OutputSection)
    server: ServerSection = field(default_factory=ServerSection)


def load_config(path: str | Path | None = None) -> DecodeConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        return DecodeConfig()

    path = Path(path)
    if not path.exists():
        log.warning("config file not found: %s, using defaults", path)
        return DecodeConfig()

    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

        cfg = DecodeConfig()
        for section_name in _SECTIONS:
            if section_name in raw:
                section = getattr(cfg, section_name)
                for k, v in raw[section_name].items():
                    if not hasattr(section, k):
                        log.warning("config: unknown key %s.%s ignored", section_name, k)
                        continue
                    setattr(section, k, v)

        log.info("config loaded from %s", path)
        return cfg
    except (OSError, yaml.YAMLError, AttributeError, TypeError) as e:
        log.warning("config load error: %s, using defaults", e)
        return DecodeConfig()
