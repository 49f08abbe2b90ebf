from .image_prompts import (
    DEFAULT_IMAGE_STYLE,
    IMAGE_CONSTRAINTS,
    IMAGE_PROMPT_HEADER,
    build_image_prompt,
)

__all__ = [
    "DEFAULT_IMAGE_STYLE",
    "IMAGE_CONSTRAINTS",
    "IMAGE_PROMPT_HEADER",
    "build_image_prompt",
]
