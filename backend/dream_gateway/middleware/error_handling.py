"""
Error handling middleware.
Centralizes error handling and response formatting.
"""
import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from dream_gateway.api.errors import (
    UNEXPECTED_ERROR_MESSAGE,
    GatewayError,
    RequestValidationFailed,
)

logger = logging.getLogger(__name__)


def error_response(error: GatewayError) -> JSONResponse:
    """Render a gateway error in its wire shape."""
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_body(),
        headers=error.headers,
    )


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Gateway error",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
                "error": exc.message,
            },
        )
    return error_response(exc)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        },
    )
    return error_response(RequestValidationFailed("Invalid JSON body."))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Last-resort handler: nothing below this layer leaks a traceback."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except GatewayError as e:
            return await gateway_error_handler(request, e)

        except Exception as e:
            logger.error(
                "Unhandled error",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={"error": {"message": UNEXPECTED_ERROR_MESSAGE}},
            )
