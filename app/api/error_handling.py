from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import ServiceError
from app.core.logging import get_logger
from app.core.messages import SERVER_MESSAGES, VALIDATION_MESSAGES

logger = get_logger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Map every error class to a status code and a message, once."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        logger.warning(
            "service_error",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            error_code=exc.error_code,
            error_type=type(exc).__name__,
        )
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.info(
            "request_validation_error",
            path=request.url.path,
            fields=[".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()],
        )
        return _error_response(400, VALIDATION_MESSAGES["fieldRequired"])

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error_response(404, SERVER_MESSAGES["notFound"])
        message = exc.detail if isinstance(exc.detail, str) else SERVER_MESSAGES["internalError"]
        return _error_response(exc.status_code, message)

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
        )
        return _error_response(500, SERVER_MESSAGES["internalError"])
