"""Token resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_load, validate

from message_archive.schemas.common import required_text
from message_archive.services.tokens.dto import TokenCreateIn


class TokenCreateSchema(Schema):
    """Payload for issuing a token; ``expiresIn`` is a lifetime in seconds."""

    name = required_text()
    expires_in = fields.Integer(
        load_default=None,
        allow_none=True,
        strict=True,
        validate=validate.Range(min=1),
        data_key="expiresIn",
    )

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> TokenCreateIn:
        return TokenCreateIn(**data)


class TokenSchema(Schema):
    """Representation of an issued token, secret included."""

    id = fields.String(required=True)
    token = fields.String(required=True)
    name = fields.String(required=True)
    expires_at = fields.DateTime(required=True, data_key="expiresAt")
    created_at = fields.DateTime(required=True, data_key="createdAt")
    updated_at = fields.DateTime(required=True, data_key="updatedAt")
