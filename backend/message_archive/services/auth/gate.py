"""Bearer-token authentication gate.

The gate is framework-agnostic: it receives the request method, path and raw
``Authorization`` header and returns a :class:`GateDecision`. The Flask
binding lives in :mod:`message_archive.api.auth`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from message_archive.services._shared.errors import StoreError
from message_archive.services.auth.dto import (
    AUTH_REQUIRED,
    INVALID_FORMAT,
    INVALID_TOKEN,
    VALIDATION_FAILED,
    GateDecision,
    GateState,
)
from message_archive.services.tokens.dto import TokenOut

log = logging.getLogger(__name__)

BEARER = "Bearer"

TokenLookup = Callable[[str], TokenOut | None]


def parse_bearer(header: str) -> str | None:
    """
    Extract the credential from ``Bearer <value>``.

    The header must split on single spaces into exactly two parts, the first
    being the literal ``Bearer`` (case-sensitive). An empty credential is
    well-formed; the lookup rejects it.

    :returns: The credential, or ``None`` when the format is wrong.
    """
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != BEARER:
        return None
    return parts[1]


class AuthGate:
    """
    Decide whether a request may proceed.

    :param lookup: Resolves a bearer secret to a live token or ``None``; may
        raise :class:`StoreError`.
    :param bypass: ``(METHOD, path)`` pairs served without authentication,
        matched exactly.
    """

    def __init__(self, lookup: TokenLookup, *, bypass: Iterable[tuple[str, str]] = ()) -> None:
        self.lookup = lookup
        self.bypass = frozenset((method.upper(), path) for method, path in bypass)

    def is_bypassed(self, method: str, path: str) -> bool:
        return (method.upper(), path) in self.bypass

    def check(self, method: str, path: str, authorization: str | None) -> GateDecision:
        """
        Run one request through the gate.

        Steps, in order: exact bypass match, header presence, header format,
        token lookup. A store failure during lookup is a 500, never a 401.
        """
        if self.is_bypassed(method, path):
            return GateDecision(state=GateState.VALIDATED, bypassed=True)

        if not authorization:
            return self._reject(401, AUTH_REQUIRED, path)

        credential = parse_bearer(authorization)
        if credential is None:
            return self._reject(401, INVALID_FORMAT, path)

        try:
            token = self.lookup(credential)
        except StoreError:
            log.error("auth.lookup_failed", extra={"reason": VALIDATION_FAILED}, exc_info=True)
            return GateDecision.reject(500, VALIDATION_FAILED)

        if token is None:
            return self._reject(401, INVALID_TOKEN, path)

        return GateDecision(state=GateState.VALIDATED, token=token)

    @staticmethod
    def _reject(status: int, error: str, path: str) -> GateDecision:
        log.warning("auth.rejected", extra={"reason": error, "endpoint": path})
        return GateDecision.reject(status, error)
