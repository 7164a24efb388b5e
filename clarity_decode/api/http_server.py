"""FastAPI service exposing the decoder over HTTP.

POST /decode   raw upload in the request body, decoded payload back
GET  /version  running protocol version
GET  /health   liveness
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clarity_decode.core.decoder import Decoder
from clarity_decode.version import VersionMismatch
from clarity_decode.wire import PayloadError

log = logging.getLogger(__name__)


def create_app(decoder: Decoder | None = None) -> FastAPI:
    decoder = decoder or Decoder()
    app = FastAPI(title="Clarity Decode", version=decoder.version)
    app.state.decoder = decoder

    @app.get("/health")
    async def get_health():
        return {"ok": True}

    @app.get("/version")
    async def get_version():
        return {"version": decoder.version}

    # async def keeps decode on the event loop thread: one call at a time,
    # which the layout node table requires.
    @app.post("/decode")
    async def post_decode(request: Request):
        raw = await request.body()
        try:
            payload = decoder.decode(raw)
        except VersionMismatch as e:
            log.warning("decode rejected: version %s (running %s)", e.actual, e.expected)
            return JSONResponse(
                {
                    "error": "version_mismatch",
                    "detail": str(e),
                    "actual": e.actual,
                    "expected": e.expected,
                },
                status_code=409,
            )
        except (PayloadError, UnicodeDecodeError) as e:
            log.warning("decode rejected: %s", e)
            return JSONResponse(
                {"error": "bad_payload", "detail": str(e)},
                status_code=400,
            )
        return JSONResponse(payload.to_dict())

    return app
