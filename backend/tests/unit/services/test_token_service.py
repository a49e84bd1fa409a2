"""Tests for :class:`TokenService`."""

from __future__ import annotations

from datetime import timedelta

import pytest
from freezegun import freeze_time
from message_archive.repositories import encode_token
from message_archive.services._shared.errors import NotFoundError, ValidationError
from message_archive.services.tokens import TokenCreateIn, TokenService

from tests.factories.token import TokenRecordFactory


def zero_bytes(n: int) -> bytes:
    return b"\x00" * n


class TestTokenService:
    @pytest.fixture()
    def service(self, app) -> TokenService:
        return TokenService(random_bytes=zero_bytes)

    def test_issue_uses_service_random_bytes(self, service):
        out = service.issue(TokenCreateIn(name="ci"))

        assert out.token == encode_token(zero_bytes(32))
        assert out.id

    def test_issue_uses_configured_default_ttl(self, app, service):
        app.config["TOKEN_DEFAULT_TTL_SECONDS"] = 120
        out = service.issue(TokenCreateIn(name="cfg"))
        assert out.expires_at - out.created_at == timedelta(seconds=120)

    def test_issue_rejects_non_positive_lifetime(self, service):
        with pytest.raises(ValidationError):
            service.issue(TokenCreateIn(name="bad", expires_in=0))

    def test_list_excludes_expired_and_revoked(self, service):
        live = TokenRecordFactory()
        TokenRecordFactory(expired=True)
        revoked = TokenRecordFactory()
        service.revoke(revoked.id.hex)

        assert [t.id for t in service.list()] == [live.id.hex]

    def test_resolve(self, service):
        with freeze_time("2024-01-01 00:00:00") as frozen:
            out = service.issue(TokenCreateIn(name="short", expires_in=30))
            assert service.resolve(out.token).id == out.id
            assert service.resolve("unknown") is None

            frozen.tick(timedelta(seconds=31))
            assert service.resolve(out.token) is None

    def test_revoke_malformed_id(self, service):
        with pytest.raises(NotFoundError):
            service.revoke("not-hex")
