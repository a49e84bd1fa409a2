# message_archive/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from message_archive.services.tokens.dto import TokenOut

# ---------------------------- Gate messages -------------------------------- #

AUTH_REQUIRED = "Authentication required"
INVALID_FORMAT = "Invalid authentication format"
INVALID_TOKEN = "Invalid token"
VALIDATION_FAILED = "Error occurred during token validation"


class GateState(str, Enum):
    """Lifecycle of one request through the auth gate."""

    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"
    REJECTED = "rejected"


# ---------------------------- Output DTOs --------------------------------- #


@dataclass(frozen=True, slots=True)
class GateDecision:
    """
    Outcome of :meth:`AuthGate.check`.

    :param state: ``VALIDATED`` (including bypassed routes) or ``REJECTED``.
    :type state: GateState
    :param status: HTTP status to return when rejected.
    :type status: int | None
    :param error: Client-facing rejection message.
    :type error: str | None
    :param token: Resolved token when validated by credential.
    :type token: TokenOut | None
    :param bypassed: ``True`` when the route skips authentication.
    :type bypassed: bool
    """

    state: GateState
    status: int | None = None
    error: str | None = None
    token: TokenOut | None = None
    bypassed: bool = False

    @property
    def allowed(self) -> bool:
        return self.state is GateState.VALIDATED

    @classmethod
    def reject(cls, status: int, error: str) -> GateDecision:
        return cls(state=GateState.REJECTED, status=status, error=error)
