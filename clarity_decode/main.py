"""clarity-decode entry point.

Decode uploads from files (or stdin), one raw payload per line, writing one
JSON document per decoded payload to stdout::

    clarity-decode uploads.ndjson > decoded.ndjson

Or serve the decoder over HTTP::

    clarity-decode --serve --port 8200
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable, Iterator
from typing import TextIO

from clarity_decode.config import DecodeConfig, load_config
from clarity_decode.core.decoder import Decoder
from clarity_decode.version import VersionMismatch
from clarity_decode.wire import PayloadError

log = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Decode Clarity telemetry uploads")
    p.add_argument("files", nargs="*", help="Input files, one payload per line (default: stdin)")
    p.add_argument("--config", default=None, help="YAML config file path")
    p.add_argument("--log-level", default=None, help="Log level (default: from config)")
    p.add_argument("--indent", type=int, default=None, help="Pretty-print output JSON")
    p.add_argument("--version-override", default=None, help="Running protocol version to check against")
    p.add_argument("--serve", action="store_true", help="Run the HTTP decode service")
    p.add_argument("--host", default=None, help="HTTP host (with --serve)")
    p.add_argument("--port", type=int, default=None, help="HTTP port (with --serve)")
    return p.parse_args(argv)


def apply_overrides(cfg: DecodeConfig, args: argparse.Namespace) -> DecodeConfig:
    if args.log_level:
        cfg.logging.level = args.log_level
    if args.indent is not None:
        cfg.output.indent = args.indent
    if args.version_override:
        cfg.decoder.version = args.version_override
    if args.host:
        cfg.server.host = args.host
    if args.port is not None:
        cfg.server.port = args.port
    return cfg


def _lines(streams: Iterable[TextIO]) -> Iterator[tuple[str, int, str]]:
    for stream in streams:
        name = getattr(stream, "name", "<stdin>")
        for lineno, line in enumerate(stream, start=1):
            line = line.strip()
            if line:
                yield name, lineno, line


def decode_stream(
    decoder: Decoder, streams: Iterable[TextIO], out: TextIO, *, indent: int | None = None
) -> int:
    """Decode every payload line; returns the number of lines that failed."""
    failures = 0
    for name, lineno, line in _lines(streams):
        try:
            payload = decoder.decode(line)
        except (VersionMismatch, PayloadError) as e:
            failures += 1
            log.error("%s:%d: %s", name, lineno, e)
            continue
        out.write(payload.to_line(indent=indent) + "\n")
    return failures


def serve(decoder: Decoder, cfg: DecodeConfig) -> None:
    import uvicorn

    from clarity_decode.api.http_server import create_app

    log.info("serving decoder %s on %s:%d", decoder.version, cfg.server.host, cfg.server.port)
    uvicorn.run(
        create_app(decoder),
        host=cfg.server.host,
        port=cfg.server.port,
        log_level="warning",
    )


def run(args: argparse.Namespace) -> int:
    cfg = apply_overrides(load_config(args.config), args)
    logging.basicConfig(
        level=getattr(logging, str(cfg.logging.level).upper(), logging.INFO),
        format=cfg.logging.format,
        datefmt="%H:%M:%S",
    )
    decoder = Decoder(cfg.decoder.version, sample_chars=cfg.decoder.sample_chars)

    if args.serve:
        serve(decoder, cfg)
        return 0

    if not args.files:
        failures = decode_stream(decoder, [sys.stdin], sys.stdout, indent=cfg.output.indent)
    else:
        failures = 0
        for path in args.files:
            try:
                with open(path, encoding="utf-8") as f:
                    failures += decode_stream(decoder, [f], sys.stdout, indent=cfg.output.indent)
            except (OSError, UnicodeDecodeError) as e:
                log.error("can't read %s: %s", path, e)
                failures += 1

    if failures:
        log.warning("%d payload(s) failed to decode", failures)
    return 1 if failures else 0


def main() -> None:
    try:
        sys.exit(run(parse_args()))
    except KeyboardInterrupt:
        pass
