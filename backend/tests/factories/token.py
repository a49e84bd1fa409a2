"""Factory Boy definition for :class:`message_archive.models.TokenRecord`."""

from __future__ import annotations

import secrets
import uuid
from datetime import timedelta

import factory
from message_archive.models import TokenRecord
from message_archive.repositories import encode_token, utcnow

from tests.factories import BaseFactory


class TokenRecordFactory(BaseFactory):
    """Build persisted :class:`TokenRecord` rows valid for 30 days."""

    class Meta:
        model = TokenRecord

    class Params:
        expired = factory.Trait(
            expires_at=factory.LazyAttribute(lambda o: o.created_at - timedelta(seconds=1))
        )

    id = factory.LazyFunction(uuid.uuid4)
    token = factory.LazyFunction(lambda: encode_token(secrets.token_bytes(32)))
    name = factory.Faker("word")
    created_at = factory.LazyFunction(utcnow)
    updated_at = factory.SelfAttribute("created_at")
    expires_at = factory.LazyAttribute(lambda o: o.created_at + timedelta(days=30))
    deleted_at = None
