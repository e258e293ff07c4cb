"""
Exception handlers for the CodeSage API.

Translates exceptions raised in routes into status codes and JSON bodies
of the form {"message": ...}.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from codesage.exceptions import NotFoundError, OracleError, UploadRejectedError

logger = logging.getLogger(__name__)


def _message(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed or missing request fields -> 400 with field-level detail."""
    errors = [
        {key: value for key, value in error.items() if key in ("loc", "msg", "type")}
        for error in exc.errors()
    ]
    return _message(
        status.HTTP_400_BAD_REQUEST,
        "Invalid request data",
        errors=jsonable_encoder(errors),
    )


async def upload_rejected_handler(
    request: Request, exc: UploadRejectedError
) -> JSONResponse:
    return _message(status.HTTP_400_BAD_REQUEST, str(exc))


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _message(status.HTTP_404_NOT_FOUND, str(exc))


async def oracle_error_handler(request: Request, exc: OracleError) -> JSONResponse:
    logger.error(
        f"Oracle failure on {request.method} {request.url.path}: {exc}",
        exc_info=exc.cause,
    )
    return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Details go to the log only
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Install all CodeSage exception handlers on the app."""
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(UploadRejectedError, upload_rejected_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(OracleError, oracle_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
