"""
Prompt templates for dream artwork generation.
"""
from typing import Any, Optional

from dream_gateway.utils.validation import is_finite_number

IMAGE_PROMPT_HEADER = (
    "Create a symbolic and poetic dream artwork with a gentle, cinematic tone."
)

DEFAULT_IMAGE_STYLE = (
    "dreamy painterly illustration, semi-abstract symbolism, soft brushwork, atmospheric depth"
)

IMAGE_CONSTRAINTS = (
    "No text, no captions, no letters, no logos, no UI, no cards, no borders, "
    "no frame, no watermark, no white margins."
)


def _format_seed(seed: float) -> str:
    if float(seed).is_integer():
        return str(int(seed))
    return str(seed)


def build_image_prompt(prompt: str, size: str, style: Optional[str] = None, seed: Optional[Any] = None) -> str:
    """
    Assemble the upstream prompt.

    Lines, in order: header, canvas, style, constraints, optional seed hint,
    then the caller's prompt. Blank lines are dropped.
    """
    style_text = style.strip() if isinstance(style, str) else ""
    lines = [
        IMAGE_PROMPT_HEADER,
        f"Output canvas: exactly {size} pixels, edge-to-edge full bleed.",
        f"Visual style: {style_text or DEFAULT_IMAGE_STYLE}",
        IMAGE_CONSTRAINTS,
        f"Variation seed: {_format_seed(seed)}" if is_finite_number(seed) else "",
        f"Prompt: {prompt}",
    ]
    return "\n".join(line for line in lines if line.strip())
