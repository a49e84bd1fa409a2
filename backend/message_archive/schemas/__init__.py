"""Convenience exports for application schemas."""

from __future__ import annotations

from .message import MessageCreateSchema, MessageSchema, MessageSearchQuerySchema
from .token import TokenCreateSchema, TokenSchema

__all__ = [
    "MessageCreateSchema",
    "MessageSchema",
    "MessageSearchQuerySchema",
    "TokenCreateSchema",
    "TokenSchema",
]
