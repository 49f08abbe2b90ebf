"""
Controller for dream interpretation.

Normalizes the caller's payload into a Responses API request and reshapes
the provider's answer.
"""
import logging
from typing import Any, Dict

from dream_gateway.api.errors import RequestValidationFailed
from dream_gateway.api.models.dream import InterpretRequest, InterpretResponse
from dream_gateway.services.openai_service import OpenAIDreamService
from dream_gateway.utils.validation import is_finite_number, is_non_blank_string

logger = logging.getLogger(__name__)

# Default model to use when none is specified
DEFAULT_MODEL = "gpt-4.1-mini"


class InterpretController:
    """Controller for interpretation requests."""

    def __init__(self, service: OpenAIDreamService):
        self.service = service

    def build_payload(self, request: InterpretRequest) -> Dict[str, Any]:
        """
        Normalize an interpretation request.

        A non-empty ``input`` list wins; otherwise ``text`` is wrapped into a
        single user message.

        Raises:
            RequestValidationFailed: neither ``input`` nor ``text`` is usable
        """
        model = request.model or DEFAULT_MODEL

        if isinstance(request.input, list) and request.input:
            input_messages = request.input
        elif is_non_blank_string(request.text):
            input_messages = [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": request.text.strip()}],
                }
            ]
        else:
            raise RequestValidationFailed("input array or text is required.")

        payload: Dict[str, Any] = {"model": model, "input": input_messages}
        if is_finite_number(request.max_output_tokens):
            payload["max_output_tokens"] = request.max_output_tokens
        return payload

    async def interpret(self, request: InterpretRequest) -> InterpretResponse:
        payload = self.build_payload(request)
        result = await self.service.create_response(payload)
        return InterpretResponse(**result)
