"""
Capability contract for document collections.

A collection stores plain ``dict`` documents and offers exactly four
operations: ``insert_one``, ``update_one``, ``find`` and ``find_one``. Filters
are :class:`~message_archive.store.predicates.Filter` values, never a
store-native query language, so repositories can run against any adapter
implementing :class:`DocumentCollection`.

Every operation accepts an optional :class:`Deadline`. Adapters check it
before touching the store and while iterating cursors, and raise
:class:`DeadlineExceeded` once it has passed.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from message_archive.store.predicates import Filter, SortKey

Document = dict[str, Any]


# ------------------------------- Errors -------------------------------------


class CollectionError(Exception):
    """Store-native failure (transport, driver, constraint)."""


class DuplicateKeyError(CollectionError):
    """A write was rejected by a uniqueness constraint."""


class DeadlineExceeded(CollectionError):
    """The caller's deadline passed before the operation completed."""


# ------------------------------ Deadlines -----------------------------------


@dataclass(frozen=True, slots=True)
class Deadline:
    """Absolute cut-off on the monotonic clock for store calls.

    :param expires_at: ``time.monotonic()`` value after which calls abort.
    """

    expires_at: float
    clock: Callable[[], float] = field(default=time.monotonic, compare=False)

    @classmethod
    def after(cls, seconds: float, *, clock: Callable[[], float] = time.monotonic) -> Deadline:
        """Build a deadline ``seconds`` from now."""
        return cls(expires_at=clock() + seconds, clock=clock)

    def remaining(self) -> float:
        """Seconds left before the deadline (never negative)."""
        return max(0.0, self.expires_at - self.clock())

    def expired(self) -> bool:
        return self.clock() >= self.expires_at

    def check(self) -> None:
        """Raise :class:`DeadlineExceeded` when the deadline has passed."""
        if self.expired():
            raise DeadlineExceeded("Deadline exceeded before store call completed")


def check_deadline(deadline: Deadline | None) -> None:
    """Convenience wrapper tolerating a missing deadline."""
    if deadline is not None:
        deadline.check()


# ------------------------------- Results ------------------------------------


@dataclass(frozen=True, slots=True)
class InsertResult:
    """Outcome of :meth:`DocumentCollection.insert_one`."""

    inserted_id: Any


@dataclass(frozen=True, slots=True)
class UpdateResult:
    """Outcome of :meth:`DocumentCollection.update_one`."""

    matched_count: int


class Cursor:
    """Closable iterator over documents.

    Wraps any iterable of documents together with a ``close`` callback that
    releases the underlying resources. Iteration honours the deadline and the
    cursor closes itself on exhaustion, on error, and on ``with`` exit.
    """

    def __init__(
        self,
        documents: Iterable[Document],
        *,
        close: Callable[[], None] | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        self._documents = iter(documents)
        self._close = close
        self._deadline = deadline
        self.closed = False

    def __iter__(self) -> Iterator[Document]:
        return self

    def __next__(self) -> Document:
        if self.closed:
            raise StopIteration
        try:
            check_deadline(self._deadline)
            return next(self._documents)
        except BaseException:
            # Exhaustion, deadline expiry and driver errors all release the cursor.
            self.close()
            raise

    def __enter__(self) -> Cursor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._close is not None:
            self._close()

    def to_list(self) -> list[Document]:
        """Drain the cursor into a list and close it."""
        with self:
            return list(self)


# ------------------------------- Protocol -----------------------------------


class DocumentCollection(Protocol):
    """Narrow capability surface over one collection of documents."""

    name: str

    def insert_one(
        self, document: Mapping[str, Any], *, deadline: Deadline | None = None
    ) -> InsertResult:
        """Insert ``document`` and return the store-assigned id.

        :raises DuplicateKeyError: When a uniqueness constraint rejects it.
        :raises CollectionError: On any other store failure.
        """
        ...

    def update_one(
        self,
        filter: Filter,
        values: Mapping[str, Any],
        *,
        deadline: Deadline | None = None,
    ) -> UpdateResult:
        """Set ``values`` on at most one document matching ``filter``."""
        ...

    def find(
        self,
        filter: Filter,
        *,
        sort: Iterable[SortKey] = (),
        deadline: Deadline | None = None,
    ) -> Cursor:
        """Return a cursor over every matching document in ``sort`` order."""
        ...

    def find_one(
        self, filter: Filter, *, deadline: Deadline | None = None
    ) -> Document | None:
        """Return the first matching document or ``None``."""
        ...


__all__ = [
    "CollectionError",
    "Cursor",
    "Deadline",
    "DeadlineExceeded",
    "Document",
    "DocumentCollection",
    "DuplicateKeyError",
    "InsertResult",
    "UpdateResult",
    "check_deadline",
]
