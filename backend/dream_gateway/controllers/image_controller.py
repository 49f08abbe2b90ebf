"""
Controller for dream artwork generation.

Handles prompt validation, size normalization and prompt assembly before
handing off to the Gemini adapter.
"""
import logging
from typing import Any

from dream_gateway.api.errors import PayloadTooLarge, RequestValidationFailed, ServerMisconfigured
from dream_gateway.api.models.dream import ImageRequest, ImageResponse
from dream_gateway.services.gemini_service import GeminiImageService
from dream_gateway.services.prompts import build_image_prompt
from dream_gateway.utils.validation import is_non_blank_string

logger = logging.getLogger(__name__)

MAX_PROMPT_LENGTH = 8000
ALLOWED_SIZES = ("1024x1024", "768x768")
DEFAULT_SIZE = "1024x1024"


def normalize_size(size: Any) -> str:
    """Unknown or missing sizes fall back to the default without an error."""
    if isinstance(size, str):
        candidate = size.strip().lower()
        if candidate in ALLOWED_SIZES:
            return candidate
    return DEFAULT_SIZE


class ImageController:
    """Controller for image generation requests."""

    def __init__(self, service: GeminiImageService):
        self.service = service

    def _validate_request(self, request: ImageRequest) -> str:
        """
        Validate the prompt and return it.

        Raises:
            RequestValidationFailed 400: prompt missing or blank
            PayloadTooLarge 413: prompt longer than MAX_PROMPT_LENGTH
        """
        if not is_non_blank_string(request.prompt):
            raise RequestValidationFailed("prompt is required.")
        if len(request.prompt) > MAX_PROMPT_LENGTH:
            raise PayloadTooLarge(f"prompt must be at most {MAX_PROMPT_LENGTH} characters.")
        return request.prompt

    async def generate(self, request: ImageRequest) -> ImageResponse:
        if not self.service.configured:
            logger.error("Image generation requested but GEMINI_API_KEY is not set")
            raise ServerMisconfigured()

        prompt = self._validate_request(request)
        size = normalize_size(request.size)
        upstream_prompt = build_image_prompt(
            prompt,
            size=size,
            style=request.style,
            seed=request.seed,
        )

        image_base64 = await self.service.generate_image(upstream_prompt)
        return ImageResponse(image_base64=image_base64)
