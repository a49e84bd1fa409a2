"""Factory Boy definition for :class:`message_archive.models.MessageRecord`."""

from __future__ import annotations

import uuid

import factory
from message_archive.models import MessageRecord
from message_archive.repositories import utcnow

from tests.factories import BaseFactory


class MessageRecordFactory(BaseFactory):
    """Build persisted, live :class:`MessageRecord` rows."""

    class Meta:
        model = MessageRecord

    id = factory.LazyFunction(uuid.uuid4)
    uid = factory.Sequence(lambda n: f"msg-{n:05d}")
    channel_id = "general"
    sender = factory.Faker("user_name")
    content = factory.Faker("sentence")
    sent_at = factory.LazyFunction(utcnow)
    created_at = factory.LazyFunction(utcnow)
    updated_at = factory.SelfAttribute("created_at")
    deleted_at = None
