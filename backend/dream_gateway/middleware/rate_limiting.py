"""
Rate limiting middleware.
Applies a fixed-window limit to every request under a path prefix.
"""
import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from dream_gateway.api.errors import RateLimitExceeded
from dream_gateway.middleware.error_handling import error_response
from dream_gateway.utils.rate_limiter import FixedWindowRateLimiter, get_client_ip

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Count every request under ``path_prefix`` against a shared limiter."""

    def __init__(
        self,
        app,
        limiter: FixedWindowRateLimiter,
        path_prefix: str = "/v1",
        trust_proxy_headers: bool = False,
        name: str = "general",
    ):
        super().__init__(app)
        self.limiter = limiter
        self.name = name
        self.path_prefix = path_prefix
        self.trust_proxy_headers = trust_proxy_headers

    def _applies_to(self, path: str) -> bool:
        return path == self.path_prefix or path.startswith(self.path_prefix + "/")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self._applies_to(request.url.path):
            return await call_next(request)

        client_ip = get_client_ip(request, self.trust_proxy_headers)
        decision = self.limiter.hit(client_ip)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"limiter": self.name, "client_ip": client_ip, "count": decision.count, "limit": decision.limit},
            )
            return error_response(RateLimitExceeded(retry_after=decision.retry_after))

        return await call_next(request)
