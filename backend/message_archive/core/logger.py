"""JSON logging on stdout, correlated by request id and bearer token id.

Token *secrets* are never logged; records carry the token id only.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

#: ``extra=`` attributes copied into the JSON payload when present.
EXTRA_KEYS = ("endpoint", "elapsed_ms", "token_id", "reason", "uid", "collection")


class JSONFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, message, request id, extras."""

    def __init__(self, extra_keys: Iterable[str] = EXTRA_KEYS) -> None:
        super().__init__()
        self.extra_keys = tuple(extra_keys)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(
            (key, getattr(record, key)) for key in self.extra_keys if hasattr(record, key)
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` and, once authenticated, ``token_id`` on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            record.request_id = None
            return True
        record.request_id = ensure_request_id()
        if getattr(record, "token_id", None) is None:
            record.token_id = g.get("token_id")
        return True


def ensure_request_id() -> str:
    """
    Return the correlation id of the current request.

    The first call of a request adopts ``X-Request-ID`` or
    ``X-Correlation-ID`` when supplied, otherwise a fresh UUID4, and caches it
    on ``flask.g``. Outside a request every call yields a new id.
    """
    if not has_request_context():
        return str(uuid4())
    request_id = g.get("request_id")
    if request_id is None:
        supplied = (request.headers.get(h) for h in CORRELATION_HEADERS)
        request_id = next((value for value in supplied if value), None) or str(uuid4())
        g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout through :class:`JSONFormatter`."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else level.upper()
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Seed the request id before any other hook and echo it on every response."""

    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        # g belongs to the app context, which may span several requests.
        g.pop("request_id", None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["configure_logging", "ensure_request_id", "init_app", "JSONFormatter", "RequestIdFilter"]
