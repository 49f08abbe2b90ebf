"""
Gateway error types.

Each error knows its HTTP status and its wire body. Two envelope shapes are
in use and both are part of the client contract:

- ``{"error": {"message": "..."}}`` for validation, rate-limit and upstream errors
- ``{"error": "unauthorized"}`` / ``{"error": "server_misconfigured"}``
"""
from typing import Any, Dict, Optional

import httpx
import openai
from fastapi import status

UNEXPECTED_ERROR_MESSAGE = "Unexpected server error."


class GatewayError(Exception):
    """Base class for errors rendered straight to the caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str = UNEXPECTED_ERROR_MESSAGE, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> Dict[str, Any]:
        return {"error": {"message": self.message}}


class RequestValidationFailed(GatewayError):
    status_code = status.HTTP_400_BAD_REQUEST


class PayloadTooLarge(GatewayError):
    status_code = 413


class RateLimitExceeded(GatewayError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, retry_after: Optional[int] = None):
        super().__init__("Too many requests.")
        if retry_after is not None:
            self.headers = {"Retry-After": str(retry_after)}


class Unauthorized(GatewayError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self):
        super().__init__("unauthorized")

    def to_body(self) -> Dict[str, Any]:
        return {"error": "unauthorized"}


class ServerMisconfigured(GatewayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self):
        super().__init__("server_misconfigured")

    def to_body(self) -> Dict[str, Any]:
        return {"error": "server_misconfigured"}


class UpstreamError(GatewayError):
    """Failure reported by (or while reaching) an upstream AI provider."""

    @classmethod
    def from_exception(cls, exc: BaseException, default_status: int = 500) -> "UpstreamError":
        return cls(
            message=_extract_message(exc),
            status_code=_extract_status(exc) or default_status,
        )


def _as_status(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        code = int(value)
    except (TypeError, ValueError):
        return None
    return code if 100 <= code <= 599 else None


def _extract_status(exc: BaseException) -> Optional[int]:
    """Check the usual places SDKs keep an HTTP status."""
    for candidate in (
        getattr(exc, "status_code", None),
        getattr(exc, "status", None),
        getattr(getattr(exc, "response", None), "status_code", None),
    ):
        code = _as_status(candidate)
        if code:
            return code
    return None


def _extract_message(exc: BaseException) -> str:
    """
    Pick a provider-supplied message.

    Only messages authored by the provider SDK or by this service are
    relayed; arbitrary exception text stays in the server log.
    """
    if isinstance(exc, openai.APIError):
        body = exc.body if isinstance(exc.body, dict) else {}
        nested = body.get("error") if isinstance(body.get("error"), dict) else body
        return exc.message or nested.get("message") or UNEXPECTED_ERROR_MESSAGE
    if isinstance(exc, openai.OpenAIError):
        return str(exc) or UNEXPECTED_ERROR_MESSAGE
    if isinstance(exc, httpx.HTTPError):
        return "Upstream request failed."
    return UNEXPECTED_ERROR_MESSAGE
