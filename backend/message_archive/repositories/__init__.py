"""Repository package exposing persistence-layer access for messages and tokens."""

from __future__ import annotations

# ---------------------------------------------------------------------
# Core base exports
# ---------------------------------------------------------------------
from message_archive.repositories.base import BaseRepository, Clock, utcnow

# ---------------------------------------------------------------------
# Domain-specific repositories
# ---------------------------------------------------------------------
from message_archive.repositories.message import MessageRepository, build_search_filter
from message_archive.repositories.token import TokenRepository, encode_token, parse_token_id

__all__ = [
    # Base
    "BaseRepository",
    "Clock",
    "utcnow",
    # Domain
    "MessageRepository",
    "TokenRepository",
    "build_search_filter",
    "encode_token",
    "parse_token_id",
]
