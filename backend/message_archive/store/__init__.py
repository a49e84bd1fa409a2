"""Persistent store adapter: predicates, collection protocol and implementations."""

from __future__ import annotations

from message_archive.store.base import (
    CollectionError,
    Cursor,
    Deadline,
    DeadlineExceeded,
    Document,
    DocumentCollection,
    DuplicateKeyError,
    InsertResult,
    UpdateResult,
)
from message_archive.store.memory import InMemoryCollection
from message_archive.store.predicates import DELETED_AT, Filter, Op, SortKey, descending, live
from message_archive.store.sqlalchemy_collection import SQLAlchemyCollection

__all__ = [
    "CollectionError",
    "Cursor",
    "DELETED_AT",
    "Deadline",
    "DeadlineExceeded",
    "Document",
    "DocumentCollection",
    "DuplicateKeyError",
    "Filter",
    "InMemoryCollection",
    "InsertResult",
    "Op",
    "SQLAlchemyCollection",
    "SortKey",
    "UpdateResult",
    "descending",
    "live",
]
