"""
Conversion of errors into notification responses.

Every user-facing error leaves the API as a ``Notification`` body so the
client can show it without knowing the error classes. The ``persistent``
flag tells the client whether the notice may time out or has to be
dismissed.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bakery.core.exceptions import (
    BakeryError,
    ConcurrentUpdateError,
    CrudErrorMessage,
    DataIntegrityError,
    DataValidationError,
    EntityNotFoundError,
    UserFriendlyDataError,
)
from bakery.core.logging import get_logger, get_request_id
from bakery.schemas.common import Notification

logger = get_logger(__name__)

STATUS_CODES: dict[type[BakeryError], int] = {
    EntityNotFoundError: status.HTTP_404_NOT_FOUND,
    DataValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConcurrentUpdateError: status.HTTP_409_CONFLICT,
    DataIntegrityError: status.HTTP_409_CONFLICT,
    UserFriendlyDataError: status.HTTP_400_BAD_REQUEST,
}


def status_code_for(exc: BakeryError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return status.HTTP_400_BAD_REQUEST


def notification_response(
    status_code: int,
    kind: str,
    message: str,
    persistent: bool,
    fields: list[str] | None = None,
) -> JSONResponse:
    body = Notification(
        error=kind,
        message=message,
        persistent=persistent,
        request_id=get_request_id() or None,
        fields=fields or [],
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def bakery_error_handler(request: Request, exc: BakeryError) -> JSONResponse:
    logger.warning(
        "Request rejected",
        method=request.method,
        path=request.url.path,
        error_kind=exc.kind,
        error_message=exc.message,
        **exc.context,
    )
    return notification_response(
        status_code_for(exc),
        exc.kind,
        exc.message,
        exc.persistent,
        getattr(exc, "fields", None),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = [
        ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0])
        for error in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        method=request.method,
        path=request.url.path,
        fields=fields,
    )
    return notification_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        DataValidationError.kind,
        CrudErrorMessage.REQUIRED_FIELDS_MISSING,
        DataValidationError.persistent,
        fields,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )
    return notification_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal",
        "An unexpected error occurred",
        persistent=True,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BakeryError, bakery_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
