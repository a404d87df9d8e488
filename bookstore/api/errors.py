# bookstore/api/errors.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bookstore.domain.errors import AppError
from bookstore.utils import settings
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


def error_body(exc: AppError) -> dict:
    body = {"code": exc.code, "message": exc.message}
    if exc.details is not None:
        body["details"] = exc.details
    if settings.DEBUG and exc.debug:
        body["debug"] = exc.debug
    return body


def register_error_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message} ({exc.debug})")
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        body = {"code": "INTERNAL_ERROR", "message": "Internal server error"}
        if settings.DEBUG:
            body["debug"] = repr(exc)
        return JSONResponse(status_code=500, content=body)
