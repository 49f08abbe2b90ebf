"""
OpenAI adapter for dream interpretation and audio transcription.

Thin pass-through: no retries or timeouts beyond what the SDK does unless
UPSTREAM_TIMEOUT_SECONDS / UPSTREAM_MAX_RETRIES are configured.
"""
import logging
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from dream_gateway.api.errors import UpstreamError
from dream_gateway.config.settings import Settings

logger = logging.getLogger(__name__)


def build_openai_client(settings: Settings) -> AsyncOpenAI:
    """Create the shared OpenAI client from settings."""
    options: Dict[str, Any] = {"api_key": settings.openai_api_key}
    if settings.upstream_timeout_seconds is not None:
        options["timeout"] = settings.upstream_timeout_seconds
    if settings.upstream_max_retries is not None:
        options["max_retries"] = settings.upstream_max_retries
    return AsyncOpenAI(**options)


def _to_plain(item: Any) -> Any:
    """Provider SDK objects back to JSON-ready data, as they came off the wire."""
    if hasattr(item, "model_dump"):
        return item.model_dump(mode="json", exclude_unset=True)
    return item


class OpenAIDreamService:
    """Wraps the OpenAI Responses and audio transcription operations."""

    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def create_response(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run one Responses API call.

        Args:
            payload: ``{model, input, max_output_tokens?}``

        Returns:
            ``{"output_text": str | None, "output": [...]}``

        Raises:
            UpstreamError: provider failure, with the provider's status and message
        """
        try:
            response = await self.client.responses.create(**payload)
        except openai.OpenAIError as e:
            logger.error(f"Interpretation upstream error: {type(e).__name__}")
            raise UpstreamError.from_exception(e) from e

        output_text = getattr(response, "output_text", None)
        output: List[Any] = getattr(response, "output", None) or []
        return {
            "output_text": output_text if isinstance(output_text, str) else None,
            "output": [_to_plain(item) for item in output],
        }

    async def transcribe(
        self,
        audio: bytes,
        filename: str,
        mime_type: str,
        model: str,
        language: Optional[str],
    ) -> str:
        """Transcribe ``audio``; returns an empty string when there is no transcript."""
        options: Dict[str, Any] = {
            "file": (filename, audio, mime_type),
            "model": model,
        }
        if language:
            options["language"] = language
        try:
            transcription = await self.client.audio.transcriptions.create(**options)
        except openai.OpenAIError as e:
            logger.error(f"Transcription upstream error: {type(e).__name__}")
            raise UpstreamError.from_exception(e) from e

        if isinstance(transcription, str):
            return transcription
        return getattr(transcription, "text", None) or ""
