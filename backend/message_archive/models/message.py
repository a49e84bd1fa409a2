"""Storage table for archived chat messages."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from message_archive.core.extensions import db

from .base import ReprMixin, SoftDeleteMixin, TimestampMixin, UTCDateTime, UUIDPKMixin

LIVE_ROWS = text("deleted_at IS NULL")


class MessageRecord(UUIDPKMixin, ReprMixin, TimestampMixin, SoftDeleteMixin, db.Model):
    """
    One archived message.

    Fields
    ------
    uid : str
        Caller-supplied idempotency key. Unique among rows whose
        ``deleted_at`` is ``NULL``, so a deleted message's uid can be reused.
    channel_id : str
        Channel the message was posted in.
    sender : str
        Author handle as reported by the source system.
    content : str
        Message body (may be empty at this layer).
    sent_at : datetime
        Send time in the source system.
    """

    __tablename__ = "messages"

    uid: Mapped[str] = mapped_column(String(255), nullable=False)
    channel_id: Mapped[str] = mapped_column(String(255), nullable=False)
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sent_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        Index(
            "uq_messages_uid_live",
            "uid",
            unique=True,
            sqlite_where=LIVE_ROWS,
            postgresql_where=LIVE_ROWS,
        ),
        Index("ix_messages_channel_id_deleted_at", "channel_id", "deleted_at"),
        Index("ix_messages_sender_deleted_at", "sender", "deleted_at"),
        Index("ix_messages_sent_at_deleted_at", "sent_at", "deleted_at"),
    )
