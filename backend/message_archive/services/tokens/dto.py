# comments in English; strict reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from message_archive.domain.token import Token

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenCreateIn:
    """
    Input DTO for token issuance.

    :param name: Caller label for the token.
    :type name: str
    :param expires_in: Lifetime in seconds; the configured default when ``None``.
    :type expires_in: int | None
    """

    name: str
    expires_in: int | None = None


# ---------------------------- Output DTOs --------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenOut:
    """
    Public projection of an issued token.

    :param id: Store-assigned id (hex).
    :type id: str
    :param token: Bearer secret.
    :type token: str
    :param name: Caller label.
    :type name: str
    :param expires_at: Expiry instant (UTC).
    :type expires_at: datetime
    """

    id: str
    token: str
    name: str
    expires_at: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, token: Token) -> TokenOut:
        return cls(
            id=token.id or "",
            token=token.token,
            name=token.name,
            expires_at=token.expires_at,
            created_at=token.created_at,
            updated_at=token.updated_at,
        )
