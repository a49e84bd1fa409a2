"""
SQLAlchemy implementation of UnitOfWork for Flask.

Driver failures while opening, committing or rolling back the transaction
surface as :class:`StoreError`, the same type repositories raise for failed
statements, so callers never see raw SQLAlchemy exceptions.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterator
from contextlib import contextmanager, suppress

from flask import current_app
from sqlalchemy import event
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from message_archive.core.config import DEFAULT_TOKEN_TTL_SECONDS
from message_archive.core.extensions import db
from message_archive.models import MessageRecord, TokenRecord
from message_archive.repositories import Clock, MessageRepository, TokenRepository, utcnow
from message_archive.repositories.token import RandomBytes
from message_archive.services._shared.errors import StoreError
from message_archive.store import Deadline, SQLAlchemyCollection
from message_archive.uow.base import UnitOfWork

log = logging.getLogger(__name__)


@contextmanager
def transaction_errors(step: str) -> Iterator[None]:
    """Translate driver failures of a transaction ``step`` into :class:`StoreError`."""
    try:
        yield
    except SQLAlchemyError as exc:
        log.error("uow.%s failed: %s", step, exc, exc_info=True)
        raise StoreError(f"Transaction {step} failed") from exc


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session.

    Both collections execute on ``session``; the deadline and clock are
    propagated into every repository so all store calls of one use-case share
    the same cut-off.
    """

    def __init__(
        self,
        *,
        session: Session,
        deadline: Deadline | None = None,
        clock: Clock = utcnow,
        random_bytes: RandomBytes = secrets.token_bytes,
        token_ttl_seconds: int | None = None,
    ) -> None:
        self.session = session
        if token_ttl_seconds is None:
            token_ttl_seconds = int(
                current_app.config.get("TOKEN_DEFAULT_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS)
            )
        self.messages = MessageRepository(
            SQLAlchemyCollection(MessageRecord, session=session),
            clock=clock,
            deadline=deadline,
        )
        self.tokens = TokenRepository(
            SQLAlchemyCollection(TokenRecord, session=session),
            clock=clock,
            deadline=deadline,
            random_bytes=random_bytes,
            default_ttl_seconds=token_ttl_seconds,
        )


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent transaction.
    """

    def __init__(self, **options) -> None:
        """Initialise the Unit of Work with a shared SQLAlchemy session.

        :param options: Forwarded to :class:`SQLAlchemyRepositoryContainer`
            (``deadline``, ``clock``, ``random_bytes``, ``token_ttl_seconds``).
        """
        super().__init__(session=db.session, **options)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        with transaction_errors("commit"):
            self.session.commit()

    def rollback(self) -> None:
        with transaction_errors("rollback"):
            self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Installs a cursor-level write guard for the lifetime of the scope.
    - Always rolls back on exit.
    - Disallows ``commit()``.

    Notes
    -----
    Collections emit Core statements, so the guard works at
    ``before_cursor_execute`` rather than on ORM flushes.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
    )

    def __init__(self, **options) -> None:
        super().__init__(session=db.session, **options)
        self._conn: Connection | None = None
        self._listener_installed = False

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        with transaction_errors("begin"):
            self._conn = self.session.connection()
        event.listen(self._conn, "before_cursor_execute", self._block_writes)
        self._listener_installed = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            if self._listener_installed and self._conn is not None:
                with suppress(Exception):
                    event.remove(self._conn, "before_cursor_execute", self._block_writes)
            self._listener_installed = False
            self._conn = None

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        with transaction_errors("rollback"):
            self.session.rollback()

    # ----------------------------- Guards --------------------------------------

    def _block_writes(self, conn, cursor, statement, parameters, context, executemany):
        first_token = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if first_token.startswith(self._WRITE_PREFIXES):
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {first_token.upper()}")
