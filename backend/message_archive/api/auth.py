"""Flask binding of the bearer-token :class:`AuthGate`."""

from __future__ import annotations

from flask import Flask, g, jsonify, request

from message_archive.api.deps import request_deadline
from message_archive.core.logger import ensure_request_id
from message_archive.services._shared.base import ServiceContext
from message_archive.services.auth import AuthGate, GateState
from message_archive.services.tokens import TokenOut, TokenService

AUTHORIZATION_HEADER = "Authorization"


def token_issuance_route(app: Flask) -> tuple[str, str]:
    """Return the ``(method, path)`` pair served without authentication."""
    from message_archive.api.v1 import API_VERSION

    prefix = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")
    return "POST", f"{prefix}/{API_VERSION}/tokens"


def resolve_token(value: str) -> TokenOut | None:
    """Look a bearer secret up within the current request's deadline."""
    ctx = ServiceContext(request_id=ensure_request_id(), deadline=request_deadline())
    return TokenService(ctx=ctx).resolve(value)


def init_app(app: Flask) -> None:
    """
    Install the gate as a ``before_request`` hook.

    Rejections short-circuit with the literal ``{"error": "..."}`` body. On
    success the resolved token and its id are attached to ``flask.g`` as
    ``g.token`` / ``g.token_id``. CORS preflight (``OPTIONS``) requests carry
    no credentials and are answered without a lookup.
    """
    gate = AuthGate(resolve_token, bypass=[token_issuance_route(app)])
    app.extensions["auth_gate"] = gate

    @app.before_request
    def _authenticate():
        for key in ("token", "token_id", "store_deadline"):
            g.pop(key, None)
        g.auth_state = GateState.UNVALIDATED
        if request.method == "OPTIONS":
            return None
        decision = gate.check(
            request.method, request.path, request.headers.get(AUTHORIZATION_HEADER)
        )
        g.auth_state = decision.state
        if not decision.allowed:
            return jsonify({"error": decision.error}), decision.status
        if decision.token is not None:
            g.token = decision.token
            g.token_id = decision.token.id
        return None


__all__ = ["init_app", "resolve_token", "token_issuance_route"]
