# comments in English; strict reST docstrings
from __future__ import annotations

from message_archive.services._shared.base import BaseService
from message_archive.services.messages.dto import MessageCreateIn, MessageOut, MessageSearchIn


class MessageService(BaseService):
    """
    Application service for the **message archive**.

    Responsibilities
    ----------------
    - Archive messages (one insert per call).
    - Search live messages, newest ``sent_at`` first, with no implicit limit.
    - Logically delete messages by uid.

    Notes
    -----
    - This service is framework-agnostic; no Flask/HTTP types leak here.
    - Results flow back exactly as the repository returns them.
    - Duplicate live uids surface as :class:`ConflictError` from the repository.
    """

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def create(self, dto: MessageCreateIn) -> MessageOut:
        """
        Archive a message.

        :param dto: Creation DTO.
        :type dto: :class:`MessageCreateIn`
        :returns: Stored message with repository-stamped timestamps.
        :rtype: :class:`MessageOut`
        :raises ConflictError: When a live message already uses ``dto.uid``.
        :raises StoreError: On store failure.
        """
        with self.rw_uow() as uow:
            message = uow.messages.create(dto.to_entity())
            return MessageOut.from_entity(message)

    def delete(self, uid: str) -> None:
        """
        Logically delete the live message with ``uid``.

        :raises NotFoundError: When no live message has this uid.
        """
        with self.rw_uow() as uow:
            uow.messages.delete(uid)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def search(self, dto: MessageSearchIn) -> list[MessageOut]:
        """
        Search live messages.

        :param dto: Search DTO; unset fields do not constrain the result.
        :type dto: :class:`MessageSearchIn`
        :returns: Matching messages, newest ``sent_at`` first.
        :rtype: list[:class:`MessageOut`]
        :raises StoreError: On store failure.
        """
        with self.ro_uow() as uow:
            rows = uow.messages.search(dto.to_criteria())
            return [MessageOut.from_entity(m) for m in rows]
