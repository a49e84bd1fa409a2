"""Message resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from message_archive.domain.message import KeywordMode
from message_archive.schemas.common import required_text, utc_datetime
from message_archive.services.messages.dto import MessageCreateIn, MessageSearchIn

#: Output formats supported by the search endpoint.
SEARCH_FORMATS = ("json", "markdown")


class MessageCreateSchema(Schema):
    """Payload for archiving a message. Every field is required and non-empty."""

    uid = required_text()
    channel_id = required_text(data_key="channelID")
    sender = required_text()
    content = required_text()
    sent_at = utc_datetime(required=True, data_key="sentAt")

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> MessageCreateIn:
        return MessageCreateIn(**data)


class MessageSearchQuerySchema(Schema):
    """
    Supported query parameters of ``GET /messages/search``.

    ``keywords`` is a comma-separated list matched case-insensitively against
    the message content; ``keywordSearchMethod`` picks whether every keyword
    (``and``, the default) or any of them (``or``) must occur. An inverted
    date range is not an error: it simply matches nothing.
    """

    class Meta:
        unknown = EXCLUDE

    channel_id = fields.String(load_default=None, data_key="channelID")
    sender = fields.String(load_default=None)
    from_date = utc_datetime(load_default=None, data_key="fromDate")
    to_date = utc_datetime(load_default=None, data_key="toDate")
    keywords = fields.String(load_default="")
    keyword_mode = fields.Enum(
        KeywordMode,
        by_value=True,
        load_default=KeywordMode.AND,
        data_key="keywordSearchMethod",
    )
    format = fields.String(load_default="json", validate=validate.OneOf(SEARCH_FORMATS))

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> tuple[MessageSearchIn, str]:
        fmt = data.pop("format")
        raw = data.pop("keywords")
        keywords = tuple(k for k in (part.strip() for part in raw.split(",")) if k)
        return MessageSearchIn(keywords=keywords, **data), fmt


class MessageSchema(Schema):
    """Representation of an archived message."""

    uid = fields.String(required=True)
    channel_id = fields.String(required=True, data_key="channelID")
    sender = fields.String(required=True)
    content = fields.String(required=True)
    sent_at = fields.DateTime(required=True, data_key="sentAt")
    created_at = fields.DateTime(required=True, data_key="createdAt")
    updated_at = fields.DateTime(required=True, data_key="updatedAt")
