"""Bearer token entity."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(slots=True)
class Token:
    """
    An issued bearer credential.

    ``id`` is assigned by the store on insert and rendered as a hex string;
    ``token`` is the independently generated secret.
    """

    token: str
    name: str
    expires_at: datetime
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "name": self.name,
            "expires_at": self.expires_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> Token:
        raw_id = doc.get("id")
        return cls(
            id=format_token_id(raw_id),
            token=doc["token"],
            name=doc["name"],
            expires_at=doc["expires_at"],
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            deleted_at=doc.get("deleted_at"),
        )


def format_token_id(value: Any) -> str | None:
    """Render a store-native id (``uuid.UUID`` or string) as public hex."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value.hex
    return str(value)
