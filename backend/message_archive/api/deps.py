"""Shared API helpers for responses and cross-cutting request concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from message_archive.core.logger import ensure_request_id
from message_archive.services._shared.base import ServiceContext
from message_archive.store import Deadline

F = TypeVar("F", bound=Callable[..., Any])


def request_deadline() -> Deadline:
    """Return the store deadline of the current request, starting it on first use."""

    deadline = getattr(g, "store_deadline", None)
    if deadline is None:
        seconds = float(current_app.config.get("STORE_TIMEOUT_SECONDS", 10.0))
        deadline = Deadline.after(seconds)
        g.store_deadline = deadline
    return deadline


def service_context() -> ServiceContext:
    """Build the request-scoped :class:`ServiceContext` handed to services."""

    return ServiceContext(
        request_id=ensure_request_id(),
        token_id=getattr(g, "token_id", None),
        deadline=request_deadline(),
    )


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def empty_response(status: int = 204) -> Response:
    """Return a body-less response (``204 No Content`` by default)."""

    return Response(status=status)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
