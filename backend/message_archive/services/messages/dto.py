# comments in English; strict reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from message_archive.domain.message import KeywordMode, Message, SearchCriteria

# ------------------------------ Input DTOs ------------------------------ #


@dataclass(frozen=True, slots=True)
class MessageCreateIn:
    """
    Input contract for archiving one message.

    :param uid: Caller-supplied idempotency key.
    :type uid: str
    :param channel_id: Channel the message was posted in.
    :type channel_id: str
    :param sender: Author handle.
    :type sender: str
    :param content: Message body.
    :type content: str
    :param sent_at: Time the message was sent (timezone-aware).
    :type sent_at: datetime
    """

    uid: str
    channel_id: str
    sender: str
    content: str
    sent_at: datetime

    def to_entity(self) -> Message:
        return Message(
            uid=self.uid,
            channel_id=self.channel_id,
            sender=self.sender,
            content=self.content,
            sent_at=self.sent_at,
        )


@dataclass(frozen=True, slots=True)
class MessageSearchIn:
    """
    Input contract for searching the archive. Every field is optional.

    :param channel_id: Exact channel match.
    :type channel_id: str | None
    :param sender: Exact sender match.
    :type sender: str | None
    :param from_date: Inclusive lower bound on ``sent_at``.
    :type from_date: datetime | None
    :param to_date: Inclusive upper bound on ``sent_at``.
    :type to_date: datetime | None
    :param keywords: Substrings searched for in ``content``.
    :type keywords: tuple[str, ...]
    :param keyword_mode: ``AND`` (every keyword) or ``OR`` (any keyword).
    :type keyword_mode: KeywordMode
    """

    channel_id: str | None = None
    sender: str | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    keywords: tuple[str, ...] = ()
    keyword_mode: KeywordMode = KeywordMode.AND

    def to_criteria(self) -> SearchCriteria:
        return SearchCriteria(
            channel_id=self.channel_id,
            sender=self.sender,
            from_date=self.from_date,
            to_date=self.to_date,
            keywords=self.keywords,
            keyword_mode=self.keyword_mode,
        )


# ------------------------------ Output DTOs ------------------------------ #


@dataclass(frozen=True, slots=True)
class MessageOut:
    """
    Public projection of an archived message (no tombstone).
    """

    uid: str
    channel_id: str
    sender: str
    content: str
    sent_at: datetime
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_entity(cls, message: Message) -> MessageOut:
        return cls(
            uid=message.uid,
            channel_id=message.channel_id,
            sender=message.sender,
            content=message.content,
            sent_at=message.sent_at,
            created_at=message.created_at,
            updated_at=message.updated_at,
        )
