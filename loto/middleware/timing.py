"""
Per-request timing and correlation ids.

Every response carries ``X-Request-ID`` (echoed from the client when sent)
and ``X-Request-Duration-Ms``. Slow and failing requests are logged at
WARNING/ERROR with the request context as ``extra`` fields; everything else
goes to DEBUG. Health probes are never logged.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

UNLOGGED_PATHS = frozenset({"/api/v1/health/ready", "/api/v1/health/live"})
SLOW_REQUEST_MS = 1000


def _request_context(response, duration_ms: float) -> dict:
    return {
        "request_id": g.request_id,
        "method": request.method,
        "path": request.path,
        "status": response.status_code,
        "duration_ms": duration_ms,
        "remote_addr": request.remote_addr,
        "procedure_id": (request.view_args or {}).get("procedure_id"),
    }


def init_request_timing(app: Flask):
    @app.before_request
    def _start_clock():
        g.request_started = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]

    @app.after_request
    def _stop_clock(response):
        started = g.pop("request_started", None)
        if started is None:
            return response

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = g.request_id
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        if request.path in UNLOGGED_PATHS:
            return response

        if response.status_code >= 500:
            level = logging.ERROR
        elif duration_ms > SLOW_REQUEST_MS:
            level = logging.WARNING
        else:
            level = logging.DEBUG
        logger.log(level, "%s %s -> %d", request.method, request.path, response.status_code,
                   extra=_request_context(response, duration_ms))
        return response
