"""In-memory :class:`~message_archive.store.base.DocumentCollection` for unit tests."""

from __future__ import annotations

import copy
import threading
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from message_archive.store.base import (
    Cursor,
    Deadline,
    Document,
    DuplicateKeyError,
    InsertResult,
    UpdateResult,
    check_deadline,
)
from message_archive.store.predicates import Filter, SortKey, live, sort_documents


class InMemoryCollection:
    """
    Dictionary-backed collection evaluating filters in Python.

    ``unique_live`` lists fields whose value must be unique among documents
    without a tombstone, matching the partial unique indexes of the SQL
    tables. Documents are deep-copied on the way in and out so callers can
    never mutate stored state.

    .. note::
       Uses a threading lock to keep insert/update atomic in unit tests.
    """

    def __init__(self, name: str, *, unique_live: Iterable[str] = ()) -> None:
        self.name = name
        self._unique_live = tuple(unique_live)
        self._docs: dict[uuid.UUID, Document] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._docs)

    def _violates_unique(self, candidate: Mapping[str, Any], skip: uuid.UUID | None = None) -> bool:
        if candidate.get("deleted_at") is not None:
            return False
        for field in self._unique_live:
            clash = live(Filter().eq(field, candidate.get(field)))
            for doc_id, doc in self._docs.items():
                if doc_id != skip and clash.matches(doc):
                    return True
        return False

    def insert_one(
        self, document: Mapping[str, Any], *, deadline: Deadline | None = None
    ) -> InsertResult:
        check_deadline(deadline)
        with self._lock:
            stored = copy.deepcopy(dict(document))
            stored.setdefault("deleted_at", None)
            doc_id = stored.setdefault("id", uuid.uuid4())
            if self._violates_unique(stored):
                raise DuplicateKeyError(f"Duplicate key in {self.name}")
            self._docs[doc_id] = stored
        return InsertResult(inserted_id=doc_id)

    def update_one(
        self,
        filter: Filter,
        values: Mapping[str, Any],
        *,
        deadline: Deadline | None = None,
    ) -> UpdateResult:
        check_deadline(deadline)
        with self._lock:
            for doc_id, doc in self._docs.items():
                if filter.matches(doc):
                    updated = {**doc, **copy.deepcopy(dict(values))}
                    if self._violates_unique(updated, skip=doc_id):
                        raise DuplicateKeyError(f"Duplicate key in {self.name}")
                    self._docs[doc_id] = updated
                    return UpdateResult(matched_count=1)
        return UpdateResult(matched_count=0)

    def find(
        self,
        filter: Filter,
        *,
        sort: Iterable[SortKey] = (),
        deadline: Deadline | None = None,
    ) -> Cursor:
        check_deadline(deadline)
        with self._lock:
            matched = [copy.deepcopy(d) for d in self._docs.values() if filter.matches(d)]
        return Cursor(sort_documents(matched, sort), deadline=deadline)

    def find_one(self, filter: Filter, *, deadline: Deadline | None = None) -> Document | None:
        check_deadline(deadline)
        with self._lock:
            for doc in self._docs.values():
                if filter.matches(doc):
                    return copy.deepcopy(doc)
        return None


__all__ = ["InMemoryCollection"]
