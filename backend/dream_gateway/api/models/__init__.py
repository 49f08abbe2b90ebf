from .dream import (
    ImageRequest,
    ImageResponse,
    InterpretRequest,
    InterpretResponse,
    TranscribeRequest,
    TranscribeResponse,
)
from .error import ErrorCodeResponse, ErrorMessage, ErrorResponse

__all__ = [
    "ErrorResponse",
    "ErrorCodeResponse",
    "ErrorMessage",
    "InterpretRequest",
    "InterpretResponse",
    "TranscribeRequest",
    "TranscribeResponse",
    "ImageRequest",
    "ImageResponse",
]
