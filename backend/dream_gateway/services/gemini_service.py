"""
Gemini image generation adapter.

Talks to the ``generateContent`` REST endpoint directly with httpx and
pulls the first inline image out of the candidates.
"""
import json
import logging
from typing import Any, Optional

import httpx

from dream_gateway.api.errors import UpstreamError
from dream_gateway.config.settings import Settings

logger = logging.getLogger(__name__)

IMAGE_REQUEST_FAILED_MESSAGE = "Gemini image request failed."
IMAGE_OUTPUT_MISSING_MESSAGE = "Gemini image output missing."


def build_image_http_client(settings: Settings) -> httpx.AsyncClient:
    if settings.upstream_timeout_seconds is not None:
        return httpx.AsyncClient(timeout=settings.upstream_timeout_seconds)
    return httpx.AsyncClient()


def parse_json_or_none(raw: str) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def extract_error_message(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
        return error["message"]
    return None


def find_inline_image(payload: Any) -> Optional[str]:
    """First base64 payload in ``candidates[].content.parts[].inlineData.data``."""
    if not isinstance(payload, dict):
        return None
    for candidate in payload.get("candidates") or []:
        if not isinstance(candidate, dict):
            continue
        content = candidate.get("content") or {}
        if not isinstance(content, dict):
            continue
        for part in content.get("parts") or []:
            if not isinstance(part, dict):
                continue
            inline = part.get("inlineData") or part.get("inline_data")
            if isinstance(inline, dict) and isinstance(inline.get("data"), str) and inline["data"]:
                return inline["data"]
    return None


class GeminiImageService:
    """Client for Gemini image generation."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        model: str = "gemini-2.5-flash-image",
    ):
        self.api_key = api_key
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> "GeminiImageService":
        return cls(
            api_key=settings.gemini_api_key,
            http_client=http_client,
            base_url=settings.gemini_base_url,
            model=settings.gemini_image_model,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate_image(self, prompt: str) -> str:
        """
        Generate one image for ``prompt``.

        Returns:
            Base64 image bytes with newlines removed

        Raises:
            UpstreamError: non-2xx upstream status (relayed), transport
                failure (502) or a response without image data (502)
        """
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseModalities": ["IMAGE"]},
        }
        try:
            response = await self.http_client.post(
                self.endpoint,
                json=body,
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {type(e).__name__}")
            raise UpstreamError(IMAGE_REQUEST_FAILED_MESSAGE, status_code=502) from e

        payload = parse_json_or_none(response.text)

        if not response.is_success:
            message = extract_error_message(payload) or IMAGE_REQUEST_FAILED_MESSAGE
            logger.warning(
                "Gemini returned an error",
                extra={"status_code": response.status_code, "error": message},
            )
            raise UpstreamError(message, status_code=response.status_code or 502)

        image = find_inline_image(payload)
        if not image:
            raise UpstreamError(IMAGE_OUTPUT_MISSING_MESSAGE, status_code=502)

        return image.replace("\r", "").replace("\n", "")
