"""Message entity and search criteria."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class KeywordMode(str, Enum):
    """How several content keywords combine: every keyword, or any of them."""

    AND = "and"
    OR = "or"


@dataclass(slots=True)
class Message:
    """
    An archived chat message.

    ``created_at``/``updated_at`` are stamped by the repository on create;
    ``deleted_at`` stays ``None`` for every message a read path returns.
    """

    uid: str
    channel_id: str
    sender: str
    content: str
    sent_at: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "channel_id": self.channel_id,
            "sender": self.sender,
            "content": self.content,
            "sent_at": self.sent_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> Message:
        return cls(
            uid=doc["uid"],
            channel_id=doc["channel_id"],
            sender=doc["sender"],
            content=doc["content"],
            sent_at=doc["sent_at"],
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            deleted_at=doc.get("deleted_at"),
        )


@dataclass(frozen=True, slots=True)
class SearchCriteria:
    """
    Optional-field filter for message search.

    Every field is independent; ``None`` means "no constraint". Date bounds
    are inclusive on ``sent_at``.

    :param channel_id: Exact channel match.
    :param sender: Exact sender match.
    :param from_date: Lower bound (inclusive).
    :param to_date: Upper bound (inclusive).
    :param keywords: Case-insensitive substrings of ``content``; empty means no
        constraint.
    :param keyword_mode: Whether all keywords or any of them must occur.
    """

    channel_id: str | None = None
    sender: str | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    keywords: tuple[str, ...] = ()
    keyword_mode: KeywordMode = KeywordMode.AND
