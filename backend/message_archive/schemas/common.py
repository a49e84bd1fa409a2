"""Common Marshmallow fields and schemas shared across resources."""

from __future__ import annotations

from datetime import timezone

from marshmallow import fields, validate


def utc_datetime(**kwargs) -> fields.AwareDateTime:
    """ISO-8601 datetime field; naive input is read as UTC."""
    return fields.AwareDateTime(default_timezone=timezone.utc, **kwargs)


def required_text(**kwargs) -> fields.String:
    """Required string that must not be empty."""
    return fields.String(required=True, validate=validate.Length(min=1), **kwargs)
