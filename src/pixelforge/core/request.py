"""
Request building for the Gemini image API.

A GenerationRequest becomes an ordered list of parts (the reference image,
when present, first; then one text part) plus a fixed square aspect ratio.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Union

from pixelforge.core.config import DEFAULT_ASPECT_RATIO
from pixelforge.core.prompt import build_instructions, validate_prompt
from pixelforge.core.styles import (
    DEFAULT_STYLE,
    DEFAULT_TYPE,
    ArtStyle,
    SpriteType,
    parse_sprite_type,
    parse_style,
)
from pixelforge.logging_config import get_logger
from pixelforge.utils.exceptions import ValidationError

logger = get_logger(__name__)

REFERENCE_MIME_TYPE = "image/png"


@dataclass(frozen=True)
class GenerationRequest:
    """One user submission. Style and type strings are coerced to their enums."""

    prompt: str
    style: ArtStyle = DEFAULT_STYLE
    type: SpriteType = DEFAULT_TYPE
    background: str = ""
    reference_image: bytes | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        # frozen: assign coerced values through object.__setattr__
        object.__setattr__(self, "style", parse_style(self.style))
        object.__setattr__(self, "type", parse_sprite_type(self.type))
        if self.reference_image is not None and not isinstance(self.reference_image, bytes):
            raise ValidationError("Reference image must be bytes", field="reference_image")

    @property
    def has_reference(self) -> bool:
        return bool(self.reference_image)


@dataclass(frozen=True)
class TextPart:
    text: str

    def to_wire(self) -> dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True)
class InlineImagePart:
    data: bytes = field(repr=False)
    mime_type: str = REFERENCE_MIME_TYPE

    def to_wire(self) -> dict[str, Any]:
        return {
            "inlineData": {
                "mimeType": self.mime_type,
                "data": base64.b64encode(self.data).decode("ascii"),
            }
        }


RequestPart = Union[TextPart, InlineImagePart]


@dataclass(frozen=True)
class GenerationPayload:
    """Parts in send order plus the generation parameters."""

    parts: tuple[RequestPart, ...]
    aspect_ratio: str = DEFAULT_ASPECT_RATIO

    @property
    def text(self) -> str:
        """The instruction text (the single text part)."""
        return next(p.text for p in self.parts if isinstance(p, TextPart))

    @property
    def has_image(self) -> bool:
        return any(isinstance(p, InlineImagePart) for p in self.parts)

    def to_wire(self) -> dict[str, Any]:
        """Render the generateContent JSON body."""
        return {
            "contents": [{"parts": [p.to_wire() for p in self.parts]}],
            "generationConfig": {
                "responseModalities": ["TEXT", "IMAGE"],
                "imageConfig": {"aspectRatio": self.aspect_ratio},
            },
        }


def build_payload(request: GenerationRequest) -> GenerationPayload:
    """
    Build the ordered request parts for a generation request.

    Raises:
        ValidationError: If the prompt is empty after trimming
    """
    validate_prompt(request.prompt)

    text = build_instructions(
        request.prompt,
        request.style,
        request.type,
        request.background,
        with_reference=request.has_reference,
    )
    parts: list[RequestPart] = []
    if request.reference_image:
        parts.append(InlineImagePart(data=request.reference_image))
    parts.append(TextPart(text=text))

    logger.debug(
        "Built payload parts=%d has_reference=%s style=%s type=%s",
        len(parts),
        request.has_reference,
        request.style.value,
        request.type.value,
    )
    return GenerationPayload(parts=tuple(parts))
