"""Generic repository base shared by the message and token repositories.

This module centralizes persistence-only concerns:
- Access to a :class:`~message_archive.store.base.DocumentCollection`.
- An injectable clock for every timestamp the repositories stamp or compare.
- The soft-delete visibility filter applied by every read path.
- Translation of store-native failures into domain errors.
- No business logic, no commit/rollback: units of work own transactions.

Design decisions
----------------
* Reads start from :meth:`BaseRepository._visible`, never from an empty
  filter, so a tombstoned record cannot leak into any result.
* Deletes are logical: ``deleted_at`` and ``updated_at`` are set, nothing is
  removed.
* "No matching document" is a value (``None``) on read paths; genuine store
  failures surface as :class:`StoreError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from message_archive.services._shared.errors import StoreError
from message_archive.store.base import CollectionError, Deadline, DocumentCollection
from message_archive.store.predicates import DELETED_AT, Filter, live

Clock = Callable[[], datetime]

log = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class BaseRepository:
    """Persistence-only repository over one document collection.

    Subclasses set :attr:`entity` (used in error messages) and build their
    filters from :meth:`_visible`.

    This class NEVER:

    * opens/commits/rolls back transactions,
    * implements business rules or cross-aggregate coordination.
    """

    #: Human-readable entity name for errors and logs.
    entity: str = "Document"

    def __init__(
        self,
        collection: DocumentCollection,
        *,
        clock: Clock = utcnow,
        deadline: Deadline | None = None,
    ) -> None:
        """Initialise the repository.

        :param collection: Store adapter holding the documents.
        :type collection: DocumentCollection
        :param clock: Source of "now" for stamping and expiry checks.
        :type clock: Callable[[], datetime]
        :param deadline: Cut-off propagated into every store call.
        :type deadline: Deadline | None
        """
        self.collection = collection
        self.clock = clock
        self.deadline = deadline

    # ------------------------------ Extensibility ----------------------------

    def _visible(self, base: Filter | None = None) -> Filter:
        """Restrict ``base`` to records that are visible to read paths.

        Defaults to the tombstone check; subclasses may narrow it further
        (tokens also require ``expires_at > now``).
        """
        return live(base)

    def now(self) -> datetime:
        return self.clock()

    # ------------------------------ Internals --------------------------------

    @contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        """Translate store-native failures raised inside the block into :class:`StoreError`."""
        try:
            yield
        except CollectionError as exc:
            log.error(
                "%s.%s failed: %s",
                self.entity.lower(),
                operation,
                exc,
                extra={"collection": self.collection.name},
                exc_info=True,
            )
            raise StoreError(f"{self.entity} {operation} failed") from exc

    def _tombstone(self, filter: Filter) -> int:
        """Logically delete one live record matching ``filter``.

        :returns: Number of matched records (``0`` or ``1``).
        """
        now = self.now()
        with self._store_errors("delete"):
            result = self.collection.update_one(
                live(filter),
                {DELETED_AT: now, "updated_at": now},
                deadline=self.deadline,
            )
        return result.matched_count
