"""
Dream Gateway - AI proxy for the dream journal app.

FastAPI application fronting OpenAI (interpretation, transcription) and
Gemini (artwork) behind a shared-secret gate and per-client rate limits.
"""
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from dream_gateway import __version__
from dream_gateway.api.dependencies.auth import AuthPolicy
from dream_gateway.api.routers import api_router
from dream_gateway.config.settings import ConfigurationError, Settings, get_settings
from dream_gateway.middleware.auth import GatewayAuthMiddleware
from dream_gateway.middleware.body_limit import BodySizeLimitMiddleware
from dream_gateway.middleware.error_handling import ErrorHandlingMiddleware, register_exception_handlers
from dream_gateway.middleware.rate_limiting import RateLimitMiddleware
from dream_gateway.middleware.request_logging import RequestLoggingMiddleware
from dream_gateway.services.gemini_service import GeminiImageService, build_image_http_client
from dream_gateway.services.openai_service import OpenAIDreamService, build_openai_client
from dream_gateway.utils.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    settings: Settings = app.state.settings
    logger.info(
        f"Starting {settings.app_name} (auth {'required' if settings.auth_required else 'optional'}, "
        f"{settings.general_rate_max} req/{settings.general_rate_window:g}s)"
    )
    if not settings.image_generation_enabled:
        logger.warning("GEMINI_API_KEY not set; /v1/dream/image will answer server_misconfigured")

    yield

    logger.info("Shutting down...")
    await app.state.image_http_client.aclose()
    await app.state.openai_client.close()


def create_app(
    settings: Optional[Settings] = None,
    *,
    openai_client: Optional[AsyncOpenAI] = None,
    image_http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings
        openai_client: Pre-built OpenAI client (tests pass a fake)
        image_http_client: Pre-built httpx client for Gemini

    Raises:
        ConfigurationError: required configuration is missing
    """
    settings = settings or get_settings()
    settings.validate_startup()

    app = FastAPI(
        title=settings.app_name,
        description="AI gateway for dream interpretation, transcription and artwork",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.enable_docs else None,
    )

    # Shared state, handed to middleware and dependencies by reference
    app.state.settings = settings
    app.state.auth_policy = AuthPolicy.from_settings(settings)
    app.state.general_rate_limiter = FixedWindowRateLimiter(
        max_requests=settings.general_rate_max,
        window_seconds=settings.general_rate_window,
        max_keys=settings.rate_limit_max_keys,
    )
    app.state.image_rate_limiter = FixedWindowRateLimiter(
        max_requests=settings.image_rate_max,
        window_seconds=settings.image_rate_window,
        max_keys=settings.rate_limit_max_keys,
    )
    app.state.openai_client = openai_client or build_openai_client(settings)
    app.state.image_http_client = image_http_client or build_image_http_client(settings)
    app.state.openai_service = OpenAIDreamService(app.state.openai_client)
    app.state.image_service = GeminiImageService.from_settings(settings, app.state.image_http_client)

    register_exception_handlers(app)

    # Added innermost first. Request order: logging, error handling, body
    # size guard, general limiter, auth gate, image limiter, route.
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.image_rate_limiter,
        path_prefix="/v1/dream/image",
        trust_proxy_headers=settings.trust_proxy_headers,
        name="image",
    )
    app.add_middleware(GatewayAuthMiddleware, policy=app.state.auth_policy, path_prefix="/v1")
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.general_rate_limiter,
        path_prefix="/v1",
        trust_proxy_headers=settings.trust_proxy_headers,
    )
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(ErrorHandlingMiddleware)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["Authorization", "Content-Type", settings.auth_fallback_header],
        )
    app.add_middleware(RequestLoggingMiddleware, trust_proxy_headers=settings.trust_proxy_headers)

    app.include_router(api_router)

    return app


def run() -> None:
    """Console entry point: validate configuration, then serve."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        for problem in e.problems:
            logger.error(f"[startup] {problem}")
        sys.exit(1)

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
