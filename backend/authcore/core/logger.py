"""JSON logging for the auth service.

Every record carries the request id of the request that produced it. Records
never carry credentials: extras whose key names a secret are masked before
rendering, and bearer tokens are only ever referred to by digest.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
# Request-scoped keys live in the WSGI environ: ``g`` is shared by every request
# served while an outer app context is pushed.
REQUEST_ID_KEY = "authcore.request_id"
REQUEST_STARTED_KEY = "authcore.request_started"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# ``extra=`` keys rendered into the payload, in this order.
STRUCTURED_KEYS = (
    "event",
    "account_id",
    "username",
    "reason",
    "field",
    "token_digest",
    "method",
    "endpoint",
    "status",
    "elapsed_ms",
)
SECRET_KEYS = frozenset({"password", "new_password", "token", "access_token", "refresh_token"})
MASK = "***"

access_logger = logging.getLogger("authcore.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per line; secrets are masked."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in STRUCTURED_KEYS:
            if key in record.__dict__:
                payload[key] = record.__dict__[key]
        for key in SECRET_KEYS & record.__dict__.keys():
            payload[key] = MASK
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on records emitted inside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """Return the id of the current request, adopting a caller-supplied one.

    Outside a request a fresh id is returned on every call.
    """
    if not has_request_context():
        return uuid4().hex
    current = request.environ.get(REQUEST_ID_KEY)
    if current:
        return current
    incoming = next(
        (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None
    )
    request.environ[REQUEST_ID_KEY] = incoming or uuid4().hex
    return request.environ[REQUEST_ID_KEY]


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout as JSON at ``level``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed request ids, echo them back, and write one access line per request."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _start_request() -> None:
        ensure_request_id()
        request.environ[REQUEST_STARTED_KEY] = time.perf_counter()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = request.environ.get(REQUEST_STARTED_KEY)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2) if started else None
        access_logger.info(
            "%s %s -> %s",
            request.method,
            request.path,
            response.status_code,
            extra={
                "event": "http.request",
                "method": request.method,
                "endpoint": request.endpoint,
                "status": response.status_code,
                "elapsed_ms": elapsed_ms,
            },
        )
        return response


__all__ = [
    "JSONFormatter",
    "RequestIdFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
]
