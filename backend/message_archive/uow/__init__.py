"""Unit of Work abstractions and concrete implementations.

This package re-exports the SQLAlchemy-backed unit of work used by the
services, alongside the abstract contract they depend on.
"""

from .base import SupportsCommit, UnitOfWork
from .sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyRepositoryContainer,
    SQLAlchemyUnitOfWork,
)

__all__ = [
    "SupportsCommit",
    "UnitOfWork",
    "SQLAlchemyRepositoryContainer",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
