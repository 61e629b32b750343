from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import DBAPIError, IntegrityError


logger = logging.getLogger("technews.errors")


class NotFoundError(Exception):
    """Raised when a mutation targets a row that does not exist."""


class UniquenessError(Exception):
    """Raised when a write would violate a unique key (e.g. category slug)."""


class ErrorResponse(BaseModel):
    detail: str
    code: str


def _error(status_code: int, code: str, detail) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"code": code, "detail": jsonable_encoder(detail)})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(
        "Rejected invalid input",
        extra={"event": "validation_failed", "path": request.url.path, "errors": len(exc.errors())},
    )
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "BAD_REQUEST", exc.errors())


async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, "NOT_FOUND", str(exc))


async def _uniqueness_handler(request: Request, exc: UniquenessError) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, "CONFLICT", str(exc))


async def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(
        "Write rejected by store constraint",
        extra={"event": "integrity_violation", "path": request.url.path, "error": type(exc.orig).__name__},
    )
    return _error(status.HTTP_409_CONFLICT, "CONFLICT", "Write conflicts with stored data")


async def _store_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    logger.error(
        "Store failure",
        extra={"event": "store_unavailable", "path": request.url.path, "error": type(exc.orig).__name__},
    )
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "STORE_UNAVAILABLE", "Database is unavailable")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(UniquenessError, _uniqueness_handler)
    # IntegrityError is a DBAPIError; the more specific handler wins
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
    app.add_exception_handler(DBAPIError, _store_error_handler)
