"""Unit tests for :class:`SQLAlchemyCollection` against SQLite."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from message_archive.models import MessageRecord, TokenRecord
from message_archive.store import (
    CollectionError,
    Deadline,
    DeadlineExceeded,
    DuplicateKeyError,
    Filter,
    SQLAlchemyCollection,
    descending,
    live,
)
from message_archive.store.sqlalchemy_collection import like_pattern
from sqlalchemy.exc import IntegrityError

from tests.factories.message import MessageRecordFactory

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def message_doc(uid: str, *, sent_at: datetime = NOW, channel_id: str = "general") -> dict:
    return {
        "uid": uid,
        "channel_id": channel_id,
        "sender": "alice",
        "content": "hello",
        "sent_at": sent_at,
        "created_at": NOW,
        "updated_at": NOW,
        "deleted_at": None,
    }


@pytest.fixture()
def messages(session) -> SQLAlchemyCollection:
    return SQLAlchemyCollection(MessageRecord, session=session)


class TestSQLAlchemyCollection:
    def test_name_follows_table(self, messages):
        assert messages.name == "messages"
        assert SQLAlchemyCollection(TokenRecord).name == "tokens"

    def test_insert_returns_store_assigned_uuid(self, messages, session):
        result = messages.insert_one(message_doc("a"))
        session.commit()

        assert isinstance(result.inserted_id, uuid.UUID)
        doc = messages.find_one(Filter().eq("id", result.inserted_id))
        assert doc is not None
        assert doc["uid"] == "a"
        assert doc["sent_at"] == NOW
        assert doc["sent_at"].tzinfo is not None

    def test_duplicate_live_uid_raises_duplicate_key(self, messages, session):
        messages.insert_one(message_doc("a"))
        session.commit()

        with pytest.raises(DuplicateKeyError) as excinfo:
            messages.insert_one(message_doc("a"))
        assert isinstance(excinfo.value.__cause__, IntegrityError)
        session.rollback()

    def test_uid_reusable_after_tombstone(self, messages, session):
        messages.insert_one(message_doc("a"))
        assert messages.update_one(live(Filter().eq("uid", "a")), {"deleted_at": NOW}).matched_count == 1
        messages.insert_one(message_doc("a"))
        session.commit()

        assert len(messages.find(Filter().eq("uid", "a")).to_list()) == 2
        assert len(messages.find(live(Filter().eq("uid", "a"))).to_list()) == 1

    def test_update_one_is_single_row(self, messages, session):
        MessageRecordFactory(channel_id="c")
        MessageRecordFactory(channel_id="c")

        result = messages.update_one(Filter().eq("channel_id", "c"), {"deleted_at": NOW})
        session.commit()

        assert result.matched_count == 1
        assert len(messages.find(live(Filter().eq("channel_id", "c"))).to_list()) == 1

    def test_update_without_match(self, messages):
        assert messages.update_one(Filter().eq("uid", "missing"), {"deleted_at": NOW}).matched_count == 0

    def test_find_applies_sort_and_range(self, messages):
        for offset in (1, 3, 2, 10):
            MessageRecordFactory(sent_at=NOW + timedelta(hours=offset))

        flt = Filter().gte("sent_at", NOW + timedelta(hours=1)).lte("sent_at", NOW + timedelta(hours=3))
        with messages.find(flt, sort=[descending("sent_at")]) as cursor:
            hours = [int((d["sent_at"] - NOW).total_seconds() // 3600) for d in cursor]

        assert hours == [3, 2, 1]

    def test_find_returns_plain_dicts_and_closes(self, messages):
        MessageRecordFactory()
        cursor = messages.find(Filter())
        docs = cursor.to_list()

        assert cursor.closed
        assert type(docs[0]) is dict
        assert set(docs[0]) >= {"id", "uid", "channel_id", "sender", "content", "sent_at", "deleted_at"}

    def test_unknown_field_is_rejected(self, messages):
        with pytest.raises(ValueError):
            messages.find_one(Filter().eq("nope", 1))

    def test_expired_deadline_aborts(self, messages):
        expired = Deadline(expires_at=0.0, clock=lambda: 1.0)
        with pytest.raises(DeadlineExceeded):
            messages.find(Filter(), deadline=expired)
        assert issubclass(DeadlineExceeded, CollectionError)


class TestContainsCompilation:
    def test_like_pattern_escapes_wildcards(self):
        assert like_pattern("100%") == r"%100\%%"
        assert like_pattern("a_b") == r"%a\_b%"
        assert like_pattern("c:\\tmp") == "%c:\\\\tmp%"

    def test_contains_is_case_insensitive(self, messages):
        MessageRecordFactory(uid="a", content="Release 1.2 is OUT")
        MessageRecordFactory(uid="b", content="nothing to see")

        docs = messages.find(Filter().contains("content", "release")).to_list()

        assert [d["uid"] for d in docs] == ["a"]

    def test_contains_treats_wildcards_literally(self, messages):
        MessageRecordFactory(uid="pct", content="coverage at 100%")
        MessageRecordFactory(uid="plain", content="coverage at 1000")

        docs = messages.find(Filter().contains("content", "100%")).to_list()

        assert [d["uid"] for d in docs] == ["pct"]

    def test_contains_any(self, messages):
        MessageRecordFactory(uid="a", content="alpha")
        MessageRecordFactory(uid="b", content="beta")
        MessageRecordFactory(uid="c", content="gamma")

        flt = Filter().contains_any("content", ["ALPHA", "gam"])
        uids = sorted(d["uid"] for d in messages.find(flt).to_list())

        assert uids == ["a", "c"]
