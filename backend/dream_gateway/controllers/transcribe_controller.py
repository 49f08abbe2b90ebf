"""
Controller for audio transcription.
"""
import base64
import binascii
import re

from dream_gateway.api.errors import RequestValidationFailed
from dream_gateway.api.models.dream import TranscribeRequest, TranscribeResponse
from dream_gateway.services.openai_service import OpenAIDreamService

DEFAULT_FILENAME = "audio.m4a"
DEFAULT_MIME_TYPE = "audio/m4a"
DEFAULT_MODEL = "gpt-4o-mini-transcribe"
DEFAULT_LANGUAGE = "tr"

_URL_SAFE = str.maketrans("-_", "+/")
_NON_ALPHABET = re.compile(r"[^A-Za-z0-9+/]")


def decode_audio(audio_base64: str) -> bytes:
    """
    Decode a base64 audio payload.

    Decoding stops at the first ``=``. URL-safe characters are accepted,
    anything else outside the base64 alphabet (whitespace included) is
    skipped, and padding is restored.

    Raises:
        RequestValidationFailed: undecodable input or an empty result
    """
    data = audio_base64.split("=", 1)[0].translate(_URL_SAFE)
    cleaned = _NON_ALPHABET.sub("", data)
    if len(cleaned) % 4 == 1:
        # A lone trailing character carries no whole byte
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        audio = base64.b64decode(cleaned)
    except (binascii.Error, ValueError):
        raise RequestValidationFailed("Invalid audio payload.") from None
    if not audio:
        raise RequestValidationFailed("Invalid audio payload.")
    return audio


class TranscribeController:
    """Controller for transcription requests."""

    def __init__(self, service: OpenAIDreamService):
        self.service = service

    async def transcribe(self, request: TranscribeRequest) -> TranscribeResponse:
        if not isinstance(request.audio_base64, str) or not request.audio_base64:
            raise RequestValidationFailed("audioBase64 is required.")

        audio = decode_audio(request.audio_base64)

        text = await self.service.transcribe(
            audio=audio,
            filename=request.filename or DEFAULT_FILENAME,
            mime_type=request.mime_type or DEFAULT_MIME_TYPE,
            model=request.model or DEFAULT_MODEL,
            language=request.language or DEFAULT_LANGUAGE,
        )
        return TranscribeResponse(text=text)
