"""
Domain-level exceptions used within repositories and the service layer.

These exceptions are **framework-agnostic** and never import Flask, HTTP or
SQLAlchemy. They are the stable contract between repositories, the auth gate
and application services.

The translation to HTTP responses (RFC 7807) is handled by
``message_archive/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - The API layer translates them to ``APIError`` instances.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when no live record matches a key.

    An already deleted record and one that never existed are reported the
    same way.

    :param entity: Entity name (e.g., "Message").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str
    """

    entity: str
    key: str

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a uniqueness constraint rejects a write.

    :param entity: Entity name (e.g., "Message").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class ValidationError(ServiceError):
    """Raised for malformed input the data layer refuses to persist."""


class AuthenticationError(ServiceError):
    """Raised when a bearer credential is missing, malformed or not live."""


class StoreError(ServiceError):
    """
    Raised on transport or driver failure of the underlying store.

    Repositories wrap store-native failures in this type and chain the
    original exception as ``__cause__``.
    """

    def __init__(self, message: str = "Store operation failed") -> None:
        super().__init__(message)
