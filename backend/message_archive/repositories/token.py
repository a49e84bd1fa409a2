"""Token repository: issuance, expiry-aware lookup and revocation."""

from __future__ import annotations

import base64
import logging
import secrets
import uuid
from collections.abc import Callable
from datetime import timedelta

from message_archive.core.config import DEFAULT_TOKEN_TTL_SECONDS
from message_archive.domain.token import Token, format_token_id
from message_archive.repositories.base import BaseRepository, Clock, utcnow
from message_archive.services._shared.errors import NotFoundError, ValidationError
from message_archive.store.base import Deadline, DocumentCollection
from message_archive.store.predicates import Filter, descending

log = logging.getLogger(__name__)

#: Number of random bytes behind every token secret.
TOKEN_BYTES = 32

#: Listings show the most recently issued tokens first.
LIST_ORDER = (descending("created_at"),)

RandomBytes = Callable[[int], bytes]


def encode_token(raw: bytes) -> str:
    """URL-safe base64 (padded) rendering of the random secret."""
    return base64.urlsafe_b64encode(raw).decode("ascii")


def parse_token_id(token_id: str) -> uuid.UUID | None:
    """Parse a public token id into the store's native id, or ``None`` if malformed."""
    try:
        return uuid.UUID(str(token_id))
    except (TypeError, ValueError):
        return None


class TokenRepository(BaseRepository):
    """Persistence-only repository for :class:`Token`.

    Read paths only see *live* tokens. Expiry is enforced here, at lookup
    time: an expired token disappears from :meth:`list` and
    :meth:`find_by_token` without any write.
    """

    entity = "Token"

    def __init__(
        self,
        collection: DocumentCollection,
        *,
        clock: Clock = utcnow,
        deadline: Deadline | None = None,
        random_bytes: RandomBytes = secrets.token_bytes,
        default_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
    ) -> None:
        """Initialise the repository.

        :param random_bytes: Provider of ``n`` cryptographically random bytes.
            Tests inject a deterministic one.
        :type random_bytes: Callable[[int], bytes]
        :param default_ttl_seconds: Lifetime used when ``create`` gets no TTL.
        :type default_ttl_seconds: int
        """
        super().__init__(collection, clock=clock, deadline=deadline)
        self.random_bytes = random_bytes
        self.default_ttl_seconds = default_ttl_seconds

    # ---------------------------- Visibility ----------------------------

    def _unexpired(self, base: Filter | None = None) -> Filter:
        return self._visible(base).gt("expires_at", self.now())

    # ---------------------------- Commands ----------------------------

    def generate(self) -> str:
        """Return a fresh token secret from :attr:`random_bytes`."""
        return encode_token(self.random_bytes(TOKEN_BYTES))

    def create(self, name: str, ttl_seconds: int | None = None) -> Token:
        """Issue and persist a new token.

        :param name: Caller label.
        :type name: str
        :param ttl_seconds: Lifetime in seconds; the configured default
            (30 days) when ``None``.
        :type ttl_seconds: int | None
        :returns: Token carrying the store-assigned ``id``.
        :rtype: Token
        :raises ValidationError: If ``ttl_seconds`` is zero or negative.
        :raises StoreError: On insert failure.
        """
        ttl = self.default_ttl_seconds if ttl_seconds is None else int(ttl_seconds)
        if ttl <= 0:
            raise ValidationError("Token lifetime must be a positive number of seconds")

        now = self.now()
        token = Token(
            token=self.generate(),
            name=name,
            expires_at=now + timedelta(seconds=ttl),
            created_at=now,
            updated_at=now,
        )
        with self._store_errors("create"):
            result = self.collection.insert_one(token.to_document(), deadline=self.deadline)
        token.id = format_token_id(result.inserted_id)
        log.info("token.created", extra={"token_id": token.id})
        return token

    def delete(self, token_id: str) -> None:
        """Revoke a token by id.

        A malformed id and an unknown (or already revoked) id both raise
        :class:`NotFoundError`; callers cannot tell them apart.

        :raises NotFoundError: When ``token_id`` matches no live record.
        :raises StoreError: On store failure.
        """
        native_id = parse_token_id(token_id)
        if native_id is None or self._tombstone(Filter().eq("id", native_id)) == 0:
            raise NotFoundError(self.entity, str(token_id))
        log.info("token.revoked", extra={"token_id": native_id.hex})

    # ---------------------------- Queries ----------------------------

    def list(self) -> list[Token]:
        """Return live, unexpired tokens, most recently created first."""
        with self._store_errors("list"):
            with self.collection.find(
                self._unexpired(), sort=LIST_ORDER, deadline=self.deadline
            ) as cursor:
                return [Token.from_document(doc) for doc in cursor]

    def find_by_id(self, token_id: str) -> Token | None:
        """Return the non-deleted token with ``token_id`` (expired or not), else ``None``."""
        native_id = parse_token_id(token_id)
        if native_id is None:
            return None
        with self._store_errors("lookup"):
            doc = self.collection.find_one(
                self._visible(Filter().eq("id", native_id)), deadline=self.deadline
            )
        return Token.from_document(doc) if doc is not None else None

    def find_by_token(self, value: str) -> Token | None:
        """Resolve a bearer secret to its live token, or ``None``.

        This is the single enforcement point for expiry: expired tokens are
        invisible even though they are not deleted.
        """
        with self._store_errors("lookup"):
            doc = self.collection.find_one(
                self._unexpired(Filter().eq("token", value)), deadline=self.deadline
            )
        return Token.from_document(doc) if doc is not None else None
