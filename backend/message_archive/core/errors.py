"""RFC 7807 problem responses for the archive API.

Every error leaving a route handler is rendered as
``application/problem+json`` carrying a stable ``code`` and the request's
correlation id. The auth gate is the one exception: its rejections keep the
literal ``{"error": "..."}`` body and never reach these handlers.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from werkzeug.exceptions import HTTPException

from message_archive.core.logger import ensure_request_id
from message_archive.services._shared.errors import ServiceError

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

#: Stable ``code`` values for statuses raised by Werkzeug itself.
HTTP_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    500: "internal_server_error",
}


def problem_details(
    status: int, code: str, detail: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """
    Build a problem document for the current request.

    :param status: HTTP status code.
    :param code: Machine-readable error code.
    :param detail: Client-safe summary.
    :param details: Optional structured payload (validation messages, ...).
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        problem["details"] = details
    return problem


def problem_response(problem: dict[str, Any]) -> tuple[Response, int]:
    """Serialize ``problem`` with the problem+json media type."""
    resp = jsonify(problem)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, problem["status"]


def _log_problem(kind: str, problem: dict[str, Any], exc: BaseException | None = None) -> None:
    status, code = problem["status"], problem["code"]
    if status >= 500:
        log.error("%s: code=%s status=%s", kind, code, status, exc_info=exc)
    else:
        log.warning("%s: code=%s status=%s detail=%s", kind, code, status, problem["detail"])


class APIError(Exception):
    """
    Error raised by route handlers and rendered as a problem document.

    :param message: Client-facing description.
    :param status_code: HTTP status (``400`` by default).
    :param code: Stable snake_case identifier.
    :param details: Optional structured payload.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return problem_details(self.status_code, self.code, self.message, self.details or None)


class NotFound(APIError):
    """404: no live record for the given key."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    """409: a uniqueness constraint rejected the write."""

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code="conflict")


class Unauthorized(APIError):
    """401: credential missing or not live."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code="unauthorized")


def init_app(app: Flask) -> None:
    """
    Register the problem+json error handlers on ``app``.

    ``ServiceError`` values are mapped through
    :meth:`BaseService.translate_exceptions`; marshmallow validation failures
    become 422 with per-field messages; anything unhandled is a generic 500.
    """
    from message_archive.services._shared.base import BaseService

    translator = BaseService()

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        problem = err.to_problem()
        _log_problem("APIError", problem, err.__cause__)
        return problem_response(problem)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = translator.translate_exceptions(err)
        if not isinstance(translated, APIError):
            return handle_unexpected_error(err)
        problem = translated.to_problem()
        _log_problem("ServiceError", problem, err)
        return problem_response(problem)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = HTTP_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or code.replace("_", " ").capitalize()).strip()
        problem = problem_details(status, code, detail)
        _log_problem("HTTPException", problem)
        return problem_response(problem)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        problem = problem_details(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            {"errors": err.normalized_messages()},
        )
        _log_problem("ValidationError", problem)
        return problem_response(problem)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        problem = problem_details(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"
        )
        _log_problem("Unhandled exception", problem, err)
        return problem_response(problem)


__all__ = [
    "APIError",
    "Conflict",
    "NotFound",
    "Unauthorized",
    "init_app",
    "problem_details",
    "problem_response",
]
