"""
Uniform outcome of every mutating service operation.

A mutating operation either commits completely and returns
``ServiceResult.success(...)`` or rolls back and returns
``ServiceResult.failure(error)``; callers never see partial success.
"""
from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from daybook.core.errors import ConflictError, DaybookException, StoreError
from daybook.db.base import Base

logger = structlog.get_logger(__name__)


@dataclass
class ServiceResult:
    ok: bool
    message: Optional[str] = None
    error: Optional[DaybookException] = None
    value: Any = field(default=None)

    @classmethod
    def success(cls, message: Optional[str] = None, value: Any = None) -> "ServiceResult":
        return cls(ok=True, message=message, value=value)

    @classmethod
    def failure(cls, error: DaybookException) -> "ServiceResult":
        return cls(ok=False, message=error.message, error=error)

    def unwrap(self) -> Any:
        """Return the value, or raise the carried error for the HTTP layer."""
        if not self.ok:
            raise self.error
        return self.value


def guarded_operation(
    success_message: str,
    conflict_message: str = "The record conflicts with an existing one.",
) -> Callable:
    """
    Wrap a ``fn(db, ...)`` that stages changes on the session.

    Commits on return. Domain errors, store-enforced uniqueness violations
    and other store failures roll back and become failure results.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(db: Session, *args, **kwargs) -> ServiceResult:
            try:
                value = fn(db, *args, **kwargs)
                db.commit()
            except DaybookException as exc:
                db.rollback()
                logger.info("operation_rejected", operation=fn.__name__, code=exc.code, reason=exc.message)
                return ServiceResult.failure(exc)
            except IntegrityError as exc:
                db.rollback()
                logger.warning("operation_conflict", operation=fn.__name__, error=str(exc.orig))
                return ServiceResult.failure(ConflictError(conflict_message))
            except SQLAlchemyError as exc:
                db.rollback()
                logger.exception("store_error", operation=fn.__name__)
                return ServiceResult.failure(StoreError(f"An error occurred: {exc}"))

            if isinstance(value, Base):
                db.refresh(value)
            return ServiceResult.success(success_message, value)

        return wrapper

    return decorator
