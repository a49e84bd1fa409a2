"""Behavioural tests for :class:`TokenRepository`."""

from __future__ import annotations

import base64
import uuid
from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time
from message_archive.models import TokenRecord
from message_archive.repositories import TokenRepository, encode_token, parse_token_id
from message_archive.repositories.token import TOKEN_BYTES
from message_archive.services._shared.errors import NotFoundError, StoreError, ValidationError
from message_archive.store import InMemoryCollection, SQLAlchemyCollection

from tests.helpers.doubles import FailingCollection

START = "2024-06-01 08:00:00"
START_DT = datetime(2024, 6, 1, 8, 0, tzinfo=UTC)


def fixed_bytes(n: int) -> bytes:
    return bytes(range(n))


class CountingBytes:
    """Deterministic provider yielding a different block on every call."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, n: int) -> bytes:
        self.calls += 1
        return bytes([self.calls % 256]) * n


@pytest.fixture(params=["memory", "sqlalchemy"])
def collection(request):
    if request.param == "memory":
        return InMemoryCollection("tokens", unique_live=("token",))
    session = request.getfixturevalue("session")
    return SQLAlchemyCollection(TokenRecord, session=session)


@pytest.fixture()
def repo(collection) -> TokenRepository:
    return TokenRepository(collection, random_bytes=CountingBytes())


class TestTokenEncoding:
    def test_encode_is_urlsafe_padded_base64(self):
        raw = bytes([0xFB, 0xFF]) * 16
        encoded = encode_token(raw)

        assert encoded == base64.urlsafe_b64encode(raw).decode()
        assert encoded.endswith("=")
        assert "+" not in encoded and "/" not in encoded

    def test_parse_token_id(self):
        value = uuid.uuid4()
        assert parse_token_id(value.hex) == value
        assert parse_token_id(str(value)) == value
        assert parse_token_id("not-an-id") is None
        assert parse_token_id("") is None


class TestCreate:
    @freeze_time(START)
    def test_create_uses_injected_randomness_and_default_ttl(self, collection):
        repo = TokenRepository(collection, random_bytes=fixed_bytes)

        token = repo.create("ci")

        assert token.token == encode_token(fixed_bytes(TOKEN_BYTES))
        assert len(base64.urlsafe_b64decode(token.token)) == 32
        assert token.name == "ci"
        assert token.created_at == token.updated_at == START_DT
        assert token.expires_at == START_DT + timedelta(seconds=2_592_000)
        assert token.id is not None
        assert uuid.UUID(token.id).hex == token.id

    @freeze_time(START)
    def test_explicit_ttl(self, repo):
        token = repo.create("short", ttl_seconds=60)
        assert token.expires_at == START_DT + timedelta(seconds=60)

    def test_configured_default_ttl(self, collection):
        repo = TokenRepository(collection, random_bytes=fixed_bytes, default_ttl_seconds=10)
        token = repo.create("cfg")
        assert token.expires_at - token.created_at == timedelta(seconds=10)

    @pytest.mark.parametrize("ttl", [0, -1, -3600])
    def test_non_positive_ttl_is_rejected(self, repo, ttl):
        with pytest.raises(ValidationError):
            repo.create("bad", ttl_seconds=ttl)
        assert repo.list() == []

    def test_created_token_is_resolvable(self, repo):
        token = repo.create("lookup")

        assert repo.find_by_token(token.token).id == token.id
        assert repo.find_by_id(token.id).token == token.token


class TestListAndExpiry:
    def test_list_orders_by_created_at_descending(self, repo):
        with freeze_time(START) as frozen:
            first = repo.create("first")
            frozen.tick(timedelta(minutes=1))
            second = repo.create("second")
            frozen.tick(timedelta(minutes=1))
            third = repo.create("third")

            assert [t.id for t in repo.list()] == [third.id, second.id, first.id]

    def test_expired_tokens_disappear_without_writes(self, repo):
        with freeze_time(START) as frozen:
            short = repo.create("short", ttl_seconds=60)
            long = repo.create("long", ttl_seconds=3600)
            assert {t.id for t in repo.list()} == {short.id, long.id}

            frozen.tick(timedelta(seconds=60))

            assert [t.id for t in repo.list()] == [long.id]
            assert repo.find_by_token(short.token) is None
            assert repo.find_by_token(long.token) is not None
            # Not deleted: still addressable by id.
            assert repo.find_by_id(short.id) is not None

    def test_expiry_boundary_is_exclusive(self, repo):
        with freeze_time(START) as frozen:
            token = repo.create("edge", ttl_seconds=10)
            frozen.tick(timedelta(seconds=9))
            assert repo.find_by_token(token.token) is not None
            frozen.tick(timedelta(seconds=1))
            assert repo.find_by_token(token.token) is None


class TestDelete:
    def test_delete_hides_token_everywhere(self, repo):
        token = repo.create("revoke-me")

        repo.delete(token.id)

        assert repo.list() == []
        assert repo.find_by_token(token.token) is None
        assert repo.find_by_id(token.id) is None

    def test_second_delete_is_not_found(self, repo):
        token = repo.create("twice")
        repo.delete(token.id)
        with pytest.raises(NotFoundError):
            repo.delete(token.id)

    @pytest.mark.parametrize("bad_id", ["", "zzz", "12345", "not-a-uuid-at-all"])
    def test_malformed_id_is_not_found(self, repo, bad_id):
        with pytest.raises(NotFoundError):
            repo.delete(bad_id)

    def test_unknown_well_formed_id_is_not_found(self, repo):
        with pytest.raises(NotFoundError):
            repo.delete(uuid.uuid4().hex)

    def test_find_by_id_with_malformed_id_is_none(self, repo):
        assert repo.find_by_id("garbage") is None


class TestStoreFailures:
    @pytest.mark.parametrize(
        "call",
        [
            lambda r: r.create("x"),
            lambda r: r.list(),
            lambda r: r.delete(uuid.uuid4().hex),
            lambda r: r.find_by_id(uuid.uuid4().hex),
            lambda r: r.find_by_token("secret"),
        ],
        ids=["create", "list", "delete", "find_by_id", "find_by_token"],
    )
    def test_transport_failures_surface_as_store_error(self, call):
        repo = TokenRepository(FailingCollection(), random_bytes=fixed_bytes)
        with pytest.raises(StoreError):
            call(repo)
