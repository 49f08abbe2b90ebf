"""
Dream endpoints.

Interpretation, transcription and artwork generation for the mobile client.
All routes sit behind the ``/v1`` auth gate; the image route also has its
own rate limiter (see ``main.create_app``).
"""
from fastapi import APIRouter, Depends, Request, status

from dream_gateway.api.models import (
    ErrorCodeResponse,
    ErrorResponse,
    ImageRequest,
    ImageResponse,
    InterpretRequest,
    InterpretResponse,
    TranscribeRequest,
    TranscribeResponse,
)
from dream_gateway.controllers.image_controller import ImageController
from dream_gateway.controllers.interpret_controller import InterpretController
from dream_gateway.controllers.transcribe_controller import TranscribeController

# ============================================================================
# Dependency Injection
# ============================================================================


def get_interpret_controller(request: Request) -> InterpretController:
    """Dependency injection for InterpretController."""
    return InterpretController(request.app.state.openai_service)


def get_transcribe_controller(request: Request) -> TranscribeController:
    """Dependency injection for TranscribeController."""
    return TranscribeController(request.app.state.openai_service)


def get_image_controller(request: Request) -> ImageController:
    """Dependency injection for ImageController."""
    return ImageController(request.app.state.image_service)


# ============================================================================
# Router
# ============================================================================

router = APIRouter()

COMMON_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    401: {"model": ErrorCodeResponse, "description": "Unauthorized"},
    413: {"model": ErrorResponse, "description": "Request body too large"},
    429: {"model": ErrorResponse, "description": "Too many requests"},
    500: {"model": ErrorResponse, "description": "Upstream or internal error"},
}


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/interpret",
    status_code=status.HTTP_200_OK,
    response_model=InterpretResponse,
    responses=COMMON_RESPONSES,
)
async def interpret_dream(
    body: InterpretRequest,
    controller: InterpretController = Depends(get_interpret_controller),
) -> InterpretResponse:
    """
    Interpret a dream with the text model.

    Accepts either a full Responses API ``input`` array or a plain ``text``
    shorthand. Returns the consolidated ``output_text`` (null when the
    provider gives none) and the raw ``output`` blocks.
    """
    return await controller.interpret(body)


@router.post(
    "/transcribe",
    status_code=status.HTTP_200_OK,
    response_model=TranscribeResponse,
    responses=COMMON_RESPONSES,
)
async def transcribe_dream(
    body: TranscribeRequest,
    controller: TranscribeController = Depends(get_transcribe_controller),
) -> TranscribeResponse:
    """Transcribe base64 audio. An empty transcript is returned as ``""``."""
    return await controller.transcribe(body)


@router.post(
    "/image",
    status_code=status.HTTP_200_OK,
    response_model=ImageResponse,
    responses={
        **COMMON_RESPONSES,
        500: {"model": ErrorCodeResponse, "description": "Image generation not configured"},
        502: {"model": ErrorResponse, "description": "Image provider failure"},
    },
)
async def generate_dream_image(
    body: ImageRequest,
    controller: ImageController = Depends(get_image_controller),
) -> ImageResponse:
    """
    Generate dream artwork.

    ``size`` is one of ``1024x1024`` / ``768x768`` (anything else falls back
    to ``1024x1024``). ``style`` and a numeric ``seed`` are folded into the
    upstream prompt.
    """
    return await controller.generate(body)
