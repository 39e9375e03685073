"""Unit tests for request building."""

import base64

import pytest

from pixelforge.core.request import (
    GenerationPayload,
    GenerationRequest,
    InlineImagePart,
    TextPart,
    build_payload,
)
from pixelforge.core.styles import STYLE_DESCRIPTORS, ArtStyle, SpriteType
from pixelforge.utils.exceptions import ValidationError

REF_BYTES = b"\x89PNG\r\n\x1a\nreference"


@pytest.mark.unit
class TestGenerationRequest:
    def test_coerces_labels_to_enums(self):
        r = GenerationRequest(prompt="a knight", style="Voxel", type="Item Icon")
        assert r.style is ArtStyle.VOXEL
        assert r.type is SpriteType.ICON

    def test_unknown_style_raises(self):
        with pytest.raises(ValidationError):
            GenerationRequest(prompt="a knight", style="Watercolor")

    def test_reference_must_be_bytes(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerationRequest(prompt="a knight", reference_image="data:image/png;base64,AA==")
        assert exc_info.value.field == "reference_image"

    def test_has_reference(self):
        assert GenerationRequest(prompt="p").has_reference is False
        assert GenerationRequest(prompt="p", reference_image=REF_BYTES).has_reference is True

    def test_frozen(self):
        r = GenerationRequest(prompt="p")
        with pytest.raises(AttributeError):
            r.prompt = "other"  # type: ignore[misc]


@pytest.mark.unit
class TestBuildPayload:
    def test_fresh_request_is_one_text_part(self):
        payload = build_payload(
            GenerationRequest(
                prompt="A knight",
                style=ArtStyle.PIXEL_ART,
                type=SpriteType.SINGLE_CHARACTER,
                background="#FF00FF",
            )
        )
        assert len(payload.parts) == 1
        assert isinstance(payload.parts[0], TextPart)
        assert "A knight" in payload.text
        assert STYLE_DESCRIPTORS[ArtStyle.PIXEL_ART] in payload.text
        assert "#FF00FF" in payload.text
        assert payload.has_image is False

    def test_reference_request_puts_image_first(self):
        payload = build_payload(
            GenerationRequest(
                prompt="Running",
                style=ArtStyle.VOXEL,
                type=SpriteType.SPRITE_SHEET,
                reference_image=REF_BYTES,
            )
        )
        assert len(payload.parts) == 2
        assert isinstance(payload.parts[0], InlineImagePart)
        assert isinstance(payload.parts[1], TextPart)
        assert payload.parts[0].data == REF_BYTES
        assert "Keep the exact same art style" in payload.text
        assert STYLE_DESCRIPTORS[ArtStyle.VOXEL] not in payload.text

    def test_empty_prompt_raises(self):
        with pytest.raises(ValidationError):
            build_payload(GenerationRequest(prompt="   "))

    def test_aspect_ratio_is_square(self):
        assert build_payload(GenerationRequest(prompt="p")).aspect_ratio == "1:1"


@pytest.mark.unit
class TestWireFormat:
    def test_inline_image_part(self):
        wire = InlineImagePart(data=b"ABC").to_wire()
        assert wire == {"inlineData": {"mimeType": "image/png", "data": "QUJD"}}

    def test_payload_body(self):
        payload = GenerationPayload(
            parts=(InlineImagePart(data=REF_BYTES), TextPart(text="draw"))
        )
        body = payload.to_wire()
        parts = body["contents"][0]["parts"]
        assert base64.b64decode(parts[0]["inlineData"]["data"]) == REF_BYTES
        assert parts[1] == {"text": "draw"}
        assert body["generationConfig"]["imageConfig"] == {"aspectRatio": "1:1"}
        assert "IMAGE" in body["generationConfig"]["responseModalities"]
