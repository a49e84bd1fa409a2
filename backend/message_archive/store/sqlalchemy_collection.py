"""SQLAlchemy-backed :class:`~message_archive.store.base.DocumentCollection`.

Each collection wraps one mapped table and talks to it through Core
statements executed on the (Flask-scoped or injected) session, so documents
are plain dictionaries keyed by column name and never ORM instances. The
session's transaction is left to the caller's unit of work: this adapter
never commits or rolls back.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, cast

from sqlalchemy import ColumnElement, Select, Table, insert, or_, select, update
from sqlalchemy.engine import Result
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from message_archive.core.extensions import db
from message_archive.store.base import (
    CollectionError,
    Cursor,
    Deadline,
    Document,
    DuplicateKeyError,
    InsertResult,
    UpdateResult,
    check_deadline,
)
from message_archive.store.predicates import Condition, Filter, Op, SortKey

log = logging.getLogger(__name__)

#: Escape character for LIKE patterns built from user text.
LIKE_ESCAPE = "\\"


def is_unique_violation(exc: IntegrityError) -> bool:
    """
    Check whether an ``IntegrityError`` comes from a uniqueness constraint.

    PostgreSQL reports ``duplicate key value violates unique constraint``;
    SQLite reports ``UNIQUE constraint failed``.

    :param exc: The exception raised by the driver.
    :type exc: IntegrityError
    :returns: ``True`` for unique/duplicate-key violations.
    :rtype: bool
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return "unique" in message or "duplicate" in message


def like_pattern(text: str) -> str:
    """Wrap ``text`` in ``%`` wildcards, escaping LIKE metacharacters it contains."""
    escaped = (
        str(text).replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", r"\%").replace("_", r"\_")
    )
    return f"%{escaped}%"


class SQLAlchemyCollection:
    """Document collection over a single SQLAlchemy table.

    :param model: Declarative model whose ``__table__`` stores the documents.
    :param session: Session shared with the unit of work. Falls back to the
        Flask-scoped ``db.session`` when omitted.
    """

    def __init__(self, model: type[Any], *, session: Session | None = None) -> None:
        self.table: Table = cast(Table, model.__table__)
        self.name: str = self.table.name
        self._session = session

    # ------------------------------ Session access ---------------------------

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Compilation -------------------------------

    def _column(self, field: str) -> ColumnElement[Any]:
        try:
            return self.table.c[field]
        except KeyError:
            raise ValueError(f"Unknown field {field!r} for collection {self.name!r}") from None

    def _clause(self, condition: Condition) -> ColumnElement[bool]:
        col = self._column(condition.field)
        if condition.op is Op.IS_NULL:
            return col.is_(None)
        if condition.op is Op.EQ:
            return col == condition.value
        if condition.op is Op.GT:
            return col > condition.value
        if condition.op is Op.GTE:
            return col >= condition.value
        if condition.op is Op.LT:
            return col < condition.value
        if condition.op is Op.LTE:
            return col <= condition.value
        if condition.op is Op.CONTAINS:
            return col.ilike(like_pattern(condition.value), escape=LIKE_ESCAPE)
        if condition.op is Op.CONTAINS_ANY:
            return or_(
                *(col.ilike(like_pattern(text), escape=LIKE_ESCAPE) for text in condition.value)
            )
        raise ValueError(f"Unsupported operator: {condition.op!r}")

    def _where(self, stmt: Select[Any], filter: Filter) -> Select[Any]:
        clauses = [self._clause(c) for c in filter.conditions]
        return stmt.where(*clauses) if clauses else stmt

    def _order(self, stmt: Select[Any], sort: Iterable[SortKey]) -> Select[Any]:
        orders = []
        for key in sort:
            col = self._column(key.field)
            orders.append(col.desc() if key.descending else col.asc())
        return stmt.order_by(*orders) if orders else stmt

    # -------------------------------- Operations -------------------------------

    def insert_one(
        self, document: Mapping[str, Any], *, deadline: Deadline | None = None
    ) -> InsertResult:
        check_deadline(deadline)
        stmt = insert(self.table).values(**dict(document))
        try:
            result = self.session.execute(stmt)
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise DuplicateKeyError(f"Duplicate key in {self.name}") from exc
            raise CollectionError(f"Insert into {self.name} rejected") from exc
        except SQLAlchemyError as exc:
            raise CollectionError(f"Insert into {self.name} failed") from exc
        pk = result.inserted_primary_key
        inserted_id = pk[0] if pk else None
        log.debug("store.insert", extra={"collection": self.name})
        return InsertResult(inserted_id=inserted_id)

    def update_one(
        self,
        filter: Filter,
        values: Mapping[str, Any],
        *,
        deadline: Deadline | None = None,
    ) -> UpdateResult:
        check_deadline(deadline)
        pk = self._column("id")
        # Restrict to a single matching row, mirroring document-store semantics.
        target = self._where(select(pk), filter).limit(1)
        stmt = (
            update(self.table)
            .where(pk.in_(target))
            .values(**dict(values))
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise CollectionError(f"Update on {self.name} failed") from exc
        return UpdateResult(matched_count=int(result.rowcount or 0))  # type: ignore[attr-defined]

    def find(
        self,
        filter: Filter,
        *,
        sort: Iterable[SortKey] = (),
        deadline: Deadline | None = None,
    ) -> Cursor:
        check_deadline(deadline)
        stmt = self._order(self._where(select(self.table), filter), sort)
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise CollectionError(f"Find on {self.name} failed") from exc
        return Cursor(self._rows(result), close=result.close, deadline=deadline)

    def find_one(self, filter: Filter, *, deadline: Deadline | None = None) -> Document | None:
        check_deadline(deadline)
        stmt = self._where(select(self.table), filter).limit(1)
        try:
            row = self.session.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            raise CollectionError(f"Find on {self.name} failed") from exc
        return dict(row) if row is not None else None

    # -------------------------------- Internals ---------------------------------

    def _rows(self, result: Result[Any]) -> Iterator[Document]:
        try:
            for row in result.mappings():
                yield dict(row)
        except SQLAlchemyError as exc:
            raise CollectionError(f"Reading from {self.name} failed") from exc


__all__ = ["SQLAlchemyCollection", "is_unique_violation", "like_pattern"]
