"""
Request and response models for the dream endpoints.

Request fields are typed loosely; normalization and the
caller-visible validation messages live in the controllers.
"""
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class InterpretRequest(BaseModel):
    """Payload for dream interpretation.

    - input: Responses API input messages [{role, content: [...]}]
    - text: shorthand, expanded into a single user message
    - max_output_tokens: forwarded only when it is a finite number
    """
    model_config = ConfigDict(populate_by_name=True)

    model: Optional[str] = None
    input: Optional[Any] = None
    text: Optional[Any] = None
    max_output_tokens: Optional[Any] = Field(
        default=None,
        validation_alias=AliasChoices("max_output_tokens", "maxOutputTokens"),
    )


class InterpretResponse(BaseModel):
    output_text: Optional[str] = None
    output: List[Dict[str, Any]] = Field(default_factory=list)


class TranscribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_base64: Optional[Any] = Field(default=None, alias="audioBase64")
    filename: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    model: Optional[str] = None
    language: Optional[str] = None


class TranscribeResponse(BaseModel):
    text: str = ""


class ImageRequest(BaseModel):
    prompt: Optional[Any] = None
    size: Optional[Any] = None
    seed: Optional[Any] = None
    style: Optional[Any] = None


class ImageResponse(BaseModel):
    image_base64: str
