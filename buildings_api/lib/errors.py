"""
Application errors and their HTTP translation.

Every error renders as ``{"message": ...}``; keyword arguments given to an
``ApiError`` are merged into the body (the frame upload adds
``success: false``).
"""
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Errors on this route also carry ``success: false``
FRAME_UPLOAD_SUFFIX = "/upload-frame"


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_body(self) -> dict:
        return {**self.extra, "message": self.message}


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class MissingFieldError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidUploadError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class UploadChannelError(ApiError):
    """The remote asset store rejected the upload or could not be reached."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _server_error(request: Request) -> JSONResponse:
    content = {"message": "Server error"}
    if request.url.path.endswith(FRAME_UPLOAD_SUFFIX):
        content = {"success": False, **content}
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"] if part != "body")
    message = f"{field}: {error['msg']}" if field else error["msg"]
    content = {"message": message}
    if request.url.path.endswith(FRAME_UPLOAD_SUFFIX):
        content = {"success": False, **content}
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("%s %s database error", request.method, request.url.path)
    return _server_error(request)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s unexpected error", request.method, request.url.path)
    return _server_error(request)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
