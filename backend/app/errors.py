"""Error taxonomy shared by the services and the HTTP layer.

Every failure the API reports carries a stable ``kind`` and a human-readable
``detail``. Services raise these directly; ``app.main`` renders them as
``{"kind": ..., "detail": ...}``.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class ServiceError(HTTPException):
    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(ServiceError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidInputError(ServiceError):
    kind = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ServiceError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class StoreFailureError(ServiceError):
    kind = "store_failure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StoreTimeoutError(StoreFailureError):
    kind = "store_timeout"
    status_code = status.HTTP_504_GATEWAY_TIMEOUT


class UnauthenticatedError(ServiceError):
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


_TIMEOUT_MARKERS = ("timeout", "timed out", "statement_timeout", "lock_timeout", "database is locked")


def is_timeout(error: sa_exc.SQLAlchemyError) -> bool:
    """True when a store error was caused by a pool, lock or statement timeout."""
    if isinstance(error, sa_exc.TimeoutError):
        return True
    if isinstance(error, sa_exc.OperationalError):
        message = str(error.orig).lower()
        return any(marker in message for marker in _TIMEOUT_MARKERS)
    return False


@contextmanager
def store_guard(db: Session, action: str) -> Iterator[None]:
    """Translate SQLAlchemy errors raised inside the block into StoreFailureError.

    The session is rolled back before the error is re-raised. No retry happens
    here; callers at the HTTP boundary own any retry policy.
    """
    try:
        yield
    except sa_exc.SQLAlchemyError as e:
        db.rollback()
        if is_timeout(e):
            logger.error("Store timeout while trying to %s", action, exc_info=True)
            raise StoreTimeoutError(f"Timed out while trying to {action}") from e
        logger.error("Store failure while trying to %s", action, exc_info=True)
        raise StoreFailureError(f"Failed to {action}") from e
