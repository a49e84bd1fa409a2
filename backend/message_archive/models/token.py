"""Storage table for issued bearer tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from message_archive.core.extensions import db

from .base import ReprMixin, SoftDeleteMixin, TimestampMixin, UTCDateTime, UUIDPKMixin

LIVE_ROWS = text("deleted_at IS NULL")


class TokenRecord(UUIDPKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    One issued bearer credential.

    Fields
    ------
    token : str
        URL-safe secret presented as ``Authorization: Bearer <token>``.
    name : str
        Caller-chosen label.
    expires_at : datetime
        Instant after which the token is no longer accepted or listed.
    """

    __tablename__ = "tokens"

    token: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        Index(
            "uq_tokens_token_live",
            "token",
            unique=True,
            sqlite_where=LIVE_ROWS,
            postgresql_where=LIVE_ROWS,
        ),
        Index("ix_tokens_expires_at_deleted_at", "expires_at", "deleted_at"),
        Index("ix_tokens_created_at_deleted_at", "created_at", "deleted_at"),
    )
