# comments in English; strict reST docstrings
from __future__ import annotations

import secrets
from typing import Any

from message_archive.repositories import Clock, utcnow
from message_archive.repositories.token import RandomBytes
from message_archive.services._shared.base import BaseService, ServiceContext
from message_archive.services.tokens.dto import TokenCreateIn, TokenOut


class TokenService(BaseService):
    """
    Bearer token lifecycle service (issue / list / revoke / resolve).

    Notes
    -----
    - Issuance is the only unauthenticated operation of the API.
    - Expiry is never written: expired tokens simply stop resolving.
    - The random-byte provider is injectable so tests get deterministic secrets.
    """

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        clock: Clock = utcnow,
        random_bytes: RandomBytes = secrets.token_bytes,
    ) -> None:
        super().__init__(ctx=ctx, clock=clock)
        self.random_bytes = random_bytes

    def uow_options(self) -> dict[str, Any]:
        return {**super().uow_options(), "random_bytes": self.random_bytes}

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def issue(self, dto: TokenCreateIn) -> TokenOut:
        """
        Generate and persist a new bearer token.

        :param dto: Issuance DTO.
        :type dto: :class:`TokenCreateIn`
        :returns: The issued token, including its secret.
        :rtype: :class:`TokenOut`
        :raises ValidationError: When ``dto.expires_in`` is not positive.
        :raises StoreError: On store failure.
        """
        with self.rw_uow() as uow:
            token = uow.tokens.create(dto.name, dto.expires_in)
            return TokenOut.from_entity(token)

    def revoke(self, token_id: str) -> None:
        """
        Logically delete a token.

        :raises NotFoundError: When the id is malformed or matches no live token.
        """
        with self.rw_uow() as uow:
            uow.tokens.delete(token_id)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def list(self) -> list[TokenOut]:
        """Return live, unexpired tokens, most recently created first."""
        with self.ro_uow() as uow:
            return [TokenOut.from_entity(t) for t in uow.tokens.list()]

    def resolve(self, value: str) -> TokenOut | None:
        """
        Resolve a bearer secret to its live token.

        :param value: Secret from the ``Authorization`` header.
        :type value: str
        :returns: The live token or ``None`` when unknown, revoked or expired.
        :rtype: :class:`TokenOut` | None
        :raises StoreError: On store failure (distinct from a negative lookup).
        """
        with self.ro_uow() as uow:
            token = uow.tokens.find_by_token(value)
            return TokenOut.from_entity(token) if token is not None else None
