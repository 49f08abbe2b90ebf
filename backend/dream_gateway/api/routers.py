from fastapi import APIRouter

from .endpoints import dream
from .endpoints import health

api_router = APIRouter()

# Health (no prefix, outside the auth gate)
api_router.include_router(health.router, prefix="", tags=["health"])

# Everything under /v1 sits behind GatewayAuthMiddleware
v1_router = APIRouter(prefix="/v1")
v1_router.include_router(dream.router, prefix="/dream", tags=["dream"])

api_router.include_router(v1_router)
