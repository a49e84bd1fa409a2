# message_archive/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from message_archive.core import errors as api_errors
from message_archive.repositories import Clock, utcnow
from message_archive.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    StoreError,
    ValidationError,
)
from message_archive.store import Deadline
from message_archive.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (auth, request ids, deadlines).

    :param request_id: Correlation id for logging/tracing.
    :param token_id: Id of the bearer token that authenticated the request.
    :param deadline: Cut-off propagated into every store call.
    """

    request_id: str | None = None
    token_id: str | None = None
    deadline: Deadline | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Every unit of work receives the context deadline and the service clock.
    """

    def __init__(self, *, ctx: ServiceContext | None = None, clock: Clock = utcnow) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (auth, tracing, deadline).
        :type ctx: ServiceContext | None
        :param clock: Source of "now" handed to the repositories.
        :type clock: Callable[[], datetime]
        """
        self.ctx = ctx or ServiceContext()
        self.clock = clock

    # -------------------------- UoW helpers ---------------------------------

    def uow_options(self) -> dict[str, Any]:
        """Keyword arguments shared by every unit of work this service opens."""
        return {"deadline": self.ctx.deadline, "clock": self.clock}

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork(**self.uow_options())

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(**self.uow_options())

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, NotFoundError):
            # → 404 Not Found
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            # → 409 Conflict
            return api_errors.Conflict(str(exc))

        if isinstance(exc, AuthenticationError):
            # → 401 Unauthorized
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, StoreError):
            # → 500; driver details stay in the logs
            return api_errors.APIError(
                message="Store operation failed",
                status_code=500,
                code="store_error",
            )

        if isinstance(exc, ValidationError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="validation_error",
            )

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
