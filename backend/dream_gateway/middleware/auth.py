"""
Authentication middleware.
Applies the shared-secret gate to every request under ``/v1`` before the
body is read.
"""
import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from dream_gateway.api.dependencies.auth import AuthPolicy, authenticate, resolve_token
from dream_gateway.api.errors import Unauthorized
from dream_gateway.middleware.error_handling import error_response

logger = logging.getLogger(__name__)


class GatewayAuthMiddleware(BaseHTTPMiddleware):
    """Reject unauthenticated requests under ``path_prefix``; sets ``request.state.principal``."""

    def __init__(self, app, policy: AuthPolicy, path_prefix: str = "/v1"):
        super().__init__(app)
        self.policy = policy
        self.path_prefix = path_prefix

    def _applies_to(self, path: str) -> bool:
        return path == self.path_prefix or path.startswith(self.path_prefix + "/")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self._applies_to(request.url.path):
            return await call_next(request)

        token = resolve_token(request, self.policy.fallback_header)
        try:
            principal = authenticate(token, self.policy)
        except Unauthorized as e:
            logger.info("Rejected request", extra={"path": request.url.path, "token_present": bool(token)})
            return error_response(e)

        request.state.principal = principal
        return await call_next(request)
