"""
Global error handling.

Domain exceptions are turned into ``{"error": message}`` responses by
exception handlers; the middleware logs every request and converts anything
unexpected into a generic 500.
"""

import time

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shoplabel.utils.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DuplicateEmailError,
    InvalidOAuthStateError,
    InvalidSignatureError,
    NotFoundError,
    ShopLabelError,
    UpstreamError,
    ValidationError,
)
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

# Checked in order, first match wins
_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DuplicateEmailError, status.HTTP_400_BAD_REQUEST),
    (InvalidOAuthStateError, status.HTTP_400_BAD_REQUEST),
    (InvalidSignatureError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (UpstreamError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: ShopLabelError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def shoplabel_exception_handler(request: Request, exc: ShopLabelError) -> JSONResponse:
    status_code = status_for(exc)

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    return error_response(status_code, exc.message, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopLabelError, shoplabel_exception_handler)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request logging and last-resort error handling.
    """

    async def dispatch(self, request: Request, call_next):
        """Process request with error handling."""
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled exception: {e}", exc_info=True)
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error"
            )

        duration = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} - {duration:.3f}s"
        )
        return response
