"""Maps identity errors and HTTP failures onto the shared error body.

Every error response looks like ``{"detail": {...}, "request_id": ...}``.
"""

from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from src.fitness.core.errors import (
    IdentityConflict,
    IdentityError,
    ReconciliationFailed,
    UniqueConstraintViolation,
    UserUnvalidated,
)

IDENTITY_ERROR_STATUS_MAP: dict[type[IdentityError], int] = {
    IdentityConflict: 409,
    UniqueConstraintViolation: 409,
    UserUnvalidated: 403,
    ReconciliationFailed: 500,
}


def map_identity_error(error: IdentityError) -> HTTPException:
    """Map an identity error to an HTTPException."""
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, IdentityConflict):
        detail["email"] = error.email
        detail["boundExternalId"] = error.bound_external_id
        detail["requestedExternalId"] = error.requested_external_id
    elif isinstance(error, UserUnvalidated):
        detail["userId"] = error.external_id
        detail["reason"] = error.reason
    elif isinstance(error, UniqueConstraintViolation):
        detail["field"] = error.field

    status_code = IDENTITY_ERROR_STATUS_MAP.get(type(error), 500)
    return HTTPException(status_code=status_code, detail=detail)


def request_id_of(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID"
    )


def _error_response(request: Request, status_code: int, detail: Any) -> JSONResponse:
    request_id = request_id_of(request)
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": jsonable_encoder(detail), "request_id": request_id},
        headers=headers,
    )


async def identity_error_handler(request: Request, exc: IdentityError) -> JSONResponse:
    http_exc = map_identity_error(exc)
    if http_exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}")
    else:
        logger.warning(f"{exc.code}: {exc.message}")
    return _error_response(request, http_exc.status_code, http_exc.detail)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    response = _error_response(request, exc.status_code, exc.detail)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.debug(f"Request validation failed: {exc.errors()}")
    return _error_response(request, 422, exc.errors())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(IdentityError, identity_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
