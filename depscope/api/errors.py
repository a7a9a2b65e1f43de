"""Map ServiceError, request validation and constraint races to JSON errors."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from depscope.services import (
    AlreadyExistsError,
    InternalError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

log = structlog.get_logger(__name__)

_STATUS_MAP: dict[type[ServiceError], int] = {
    NotFoundError: 404,
    AlreadyExistsError: 409,
    ValidationError: 422,
    InternalError: 500,
}


def status_for(exc: ServiceError) -> int:
    """HTTP status of the nearest mapped base class, 500 if none."""
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            return _STATUS_MAP[cls]
    return 500


async def _service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        # Upstream URLs and driver messages stay in the log only.
        log.error("api.internal_error", error=str(exc), cause=repr(exc.__cause__))
        return JSONResponse(status_code=status, content={"detail": "internal error"})
    log.info("api.error", status_code=status, error=str(exc))
    return JSONResponse(status_code=status, content={"detail": str(exc)})


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    # Two concurrent reconciles of one project can collide on a unique constraint.
    log.warning("api.constraint_conflict", error=str(exc.orig))
    return JSONResponse(
        status_code=409,
        content={"detail": "conflicting concurrent update, retry the request"},
    )


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=422, content={"detail": detail})


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the app."""
    app.add_exception_handler(ServiceError, _service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
