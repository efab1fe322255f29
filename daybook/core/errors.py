"""
Error kinds for the Daybook service and their HTTP rendering.

Services raise these inside guarded operations and hand them back on a
ServiceResult; routers re-raise them with ``unwrap()``. Every error carries a
machine-readable ``code`` so clients never branch on message text.
"""
from __future__ import annotations

from typing import Any

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class DaybookException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(DaybookException):
    """A referenced entity id does not resolve."""
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any = None, message: str | None = None):
        details: dict[str, Any] = {"entity": entity}
        if entity_id is not None:
            details["id"] = entity_id
        super().__init__(message=message or f"{entity} not found.", details=details)


class ConflictError(DaybookException):
    """A uniqueness rule would be violated."""
    http_status = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class InvalidMetricValueError(DaybookException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_METRIC_VALUE"

    def __init__(self, message: str, metric_id: int | None = None, metric_name: str | None = None):
        super().__init__(
            message=message,
            details={"metric_id": metric_id, "metric_name": metric_name},
        )


class InvalidOperationError(DaybookException):
    """Attempted mutation of an immutable entity, e.g. a template metric."""
    http_status = status.HTTP_400_BAD_REQUEST
    code = "INVALID_OPERATION"


class StoreError(DaybookException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORE_ERROR"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _field_path(loc: tuple) -> str:
    # ("body", "metric_values", 0, "numeric_value") -> "metric_values.0.numeric_value"
    parts = list(loc)
    if parts and parts[0] in ("body", "query", "path"):
        parts = parts[1:]
    return ".".join(str(p) for p in parts)


async def daybook_exception_handler(request: Request, exc: DaybookException) -> JSONResponse:
    logger.info(
        "request_failed",
        method=request.method,
        path=request.url.path,
        code=exc.code,
        status=exc.http_status,
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Structured 422 listing each offending field."""
    field_errors = [
        {"field": _field_path(error["loc"]), "message": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
