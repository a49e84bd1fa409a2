"""Message repository: creation, filtered search and logical deletion."""

from __future__ import annotations

import logging

from message_archive.domain.message import KeywordMode, Message, SearchCriteria
from message_archive.repositories.base import BaseRepository
from message_archive.services._shared.errors import ConflictError, NotFoundError
from message_archive.store.base import DuplicateKeyError
from message_archive.store.predicates import Filter, descending

log = logging.getLogger(__name__)

#: Search results are always most-recent first; callers render feeds from it.
SEARCH_ORDER = (descending("sent_at"),)


def build_search_filter(criteria: SearchCriteria) -> Filter:
    """Translate :class:`SearchCriteria` into a conjunctive filter.

    The tombstone clause is *not* added here; callers pass the result through
    :meth:`BaseRepository._visible`.

    :param criteria: Optional-field search criteria.
    :type criteria: SearchCriteria
    :returns: Filter with one condition per constrained field, and one per
        keyword in :attr:`KeywordMode.AND` mode.
    :rtype: Filter
    """
    f = Filter()
    if criteria.channel_id is not None:
        f = f.eq("channel_id", criteria.channel_id)
    if criteria.sender is not None:
        f = f.eq("sender", criteria.sender)
    if criteria.from_date is not None:
        f = f.gte("sent_at", criteria.from_date)
    if criteria.to_date is not None:
        f = f.lte("sent_at", criteria.to_date)
    keywords = [k for k in (kw.strip() for kw in criteria.keywords) if k]
    if not keywords:
        return f
    if criteria.keyword_mode is KeywordMode.OR:
        return f.contains_any("content", keywords)
    for keyword in keywords:
        f = f.contains("content", keyword)
    return f


class MessageRepository(BaseRepository):
    """Persistence-only repository for :class:`Message`.

    ``uid`` is unique among live messages only: once a message is deleted its
    uid may be submitted again.
    """

    entity = "Message"

    def create(self, message: Message) -> Message:
        """Stamp timestamps and insert ``message``.

        Input validation (non-empty fields) happens upstream; an empty
        ``content`` is stored as-is.

        :param message: Message to persist; mutated with the stamped timestamps.
        :type message: Message
        :returns: The same message.
        :rtype: Message
        :raises ConflictError: If a live message already uses ``message.uid``.
        :raises StoreError: On store failure.
        """
        now = self.now()
        message.created_at = now
        message.updated_at = now
        message.deleted_at = None
        with self._store_errors("create"):
            try:
                self.collection.insert_one(message.to_document(), deadline=self.deadline)
            except DuplicateKeyError as exc:
                raise ConflictError(self.entity, f"uid already exists: {message.uid}") from exc
        log.info("message.created", extra={"uid": message.uid})
        return message

    def search(self, criteria: SearchCriteria) -> list[Message]:
        """Return live messages matching ``criteria``, newest ``sent_at`` first.

        :param criteria: Optional-field search criteria.
        :type criteria: SearchCriteria
        :returns: Possibly empty list, never truncated.
        :rtype: list[Message]
        :raises StoreError: On store failure (the cursor is closed either way).
        """
        flt = self._visible(build_search_filter(criteria))
        with self._store_errors("search"):
            with self.collection.find(flt, sort=SEARCH_ORDER, deadline=self.deadline) as cursor:
                return [Message.from_document(doc) for doc in cursor]

    def delete(self, uid: str) -> None:
        """Logically delete the live message with ``uid``.

        Not idempotent: deleting an already deleted uid raises
        :class:`NotFoundError`, exactly like an unknown uid.

        :param uid: Message idempotency key.
        :type uid: str
        :raises NotFoundError: When no live message has this uid.
        :raises StoreError: On store failure.
        """
        if self._tombstone(Filter().eq("uid", uid)) == 0:
            raise NotFoundError(self.entity, uid)
        log.info("message.deleted", extra={"uid": uid})

    def find_by_uid(self, uid: str) -> Message | None:
        """Return the live message with ``uid`` or ``None``.

        :raises StoreError: On store failure.
        """
        with self._store_errors("lookup"):
            doc = self.collection.find_one(
                self._visible(Filter().eq("uid", uid)), deadline=self.deadline
            )
        return Message.from_document(doc) if doc is not None else None
