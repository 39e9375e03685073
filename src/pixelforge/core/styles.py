"""
Art styles, sprite types, and the prompt fragments that describe them.

Each closed set maps to a descriptor string through a finite table; values
missing from a table fall back to an explicit default descriptor.
"""

from enum import Enum

from pixelforge.utils.exceptions import ValidationError


class ArtStyle(str, Enum):
    """Visual style of the generated asset. Values double as display labels and stored tags."""

    PIXEL_ART = "Pixel Art"
    VECTOR_FLAT = "Vector Flat"
    HAND_DRAWN = "Hand Drawn"
    ISOMETRIC_3D = "Isometric 3D"
    VOXEL = "Voxel"
    CLAYMATION = "Claymation"
    REALISTIC_RENDER = "Realistic Render"


class SpriteType(str, Enum):
    """Category of game asset to generate."""

    SINGLE_CHARACTER = "Single Character"
    SPRITE_SHEET = "Sprite Sheet (Grid)"
    ICON = "Item Icon"
    PORTRAIT = "Character Portrait"
    TILESET = "Environment Tileset"


DEFAULT_STYLE = ArtStyle.PIXEL_ART
DEFAULT_TYPE = SpriteType.SINGLE_CHARACTER

STYLE_DESCRIPTORS: dict[ArtStyle, str] = {
    ArtStyle.PIXEL_ART: (
        "Authentic 16-bit or 32-bit pixel art style. Sharp edges, limited color palette, "
        "no anti-aliasing on the outline."
    ),
    ArtStyle.VECTOR_FLAT: (
        "Flat vector art style, clean lines, cel-shaded, mobile game aesthetic, SVG style."
    ),
    ArtStyle.HAND_DRAWN: (
        "Hand-drawn sketch style, RPG maker aesthetic, artistic, water color or pencil texture."
    ),
    ArtStyle.ISOMETRIC_3D: "Isometric 3D pre-rendered style, Diablo-like, 2.5D perspective.",
    ArtStyle.VOXEL: "Voxel art style, cube-based, Minecraft-like, blocky.",
    ArtStyle.CLAYMATION: "Claymation style, plasticine texture, rounded edges.",
    ArtStyle.REALISTIC_RENDER: "High fidelity 3D render, unreal engine style, realistic lighting.",
}
DEFAULT_STYLE_DESCRIPTOR = "Standard 2D video game art."

TYPE_DESCRIPTORS: dict[SpriteType, str] = {
    SpriteType.SINGLE_CHARACTER: "A single full-body character sprite in a neutral dynamic pose.",
    SpriteType.SPRITE_SHEET: (
        "A sprite sheet containing multiple frames of animation (e.g., idle, run, jump) "
        "arranged in a grid."
    ),
    SpriteType.ICON: "A single UI inventory icon, centered, fits in a square frame.",
    SpriteType.PORTRAIT: "A character face portrait or bust, detailed expressions.",
    SpriteType.TILESET: "A seamless tilable texture or environmental prop set (walls, floors).",
}
DEFAULT_TYPE_DESCRIPTOR = TYPE_DESCRIPTORS[SpriteType.SINGLE_CHARACTER]


def parse_style(value: "ArtStyle | str") -> ArtStyle:
    """
    Coerce a style label (e.g. "Voxel") or member name (e.g. "VOXEL") to ArtStyle.

    Raises:
        ValidationError: If the value is not a known style
    """
    if isinstance(value, ArtStyle):
        return value
    try:
        return ArtStyle(value)
    except ValueError:
        pass
    try:
        return ArtStyle[str(value).strip().upper().replace("-", "_").replace(" ", "_")]
    except KeyError:
        raise ValidationError(
            f"Unknown art style: {value!r}. Choose one of: "
            + ", ".join(s.value for s in ArtStyle),
            field="style",
        ) from None


def parse_sprite_type(value: "SpriteType | str") -> SpriteType:
    """
    Coerce a sprite type label or member name to SpriteType.

    Raises:
        ValidationError: If the value is not a known sprite type
    """
    if isinstance(value, SpriteType):
        return value
    try:
        return SpriteType(value)
    except ValueError:
        pass
    try:
        return SpriteType[str(value).strip().upper().replace("-", "_").replace(" ", "_")]
    except KeyError:
        raise ValidationError(
            f"Unknown sprite type: {value!r}. Choose one of: "
            + ", ".join(t.value for t in SpriteType),
            field="type",
        ) from None


def describe_style(style: "ArtStyle | str") -> str:
    """Return the prompt fragment for a style; unknown values get the default descriptor."""
    try:
        key = parse_style(style)
    except ValidationError:
        return DEFAULT_STYLE_DESCRIPTOR
    return STYLE_DESCRIPTORS.get(key, DEFAULT_STYLE_DESCRIPTOR)


def describe_type(sprite_type: "SpriteType | str") -> str:
    """Return the prompt fragment for a sprite type; unknown values get the default descriptor."""
    try:
        key = parse_sprite_type(sprite_type)
    except ValidationError:
        return DEFAULT_TYPE_DESCRIPTOR
    return TYPE_DESCRIPTORS.get(key, DEFAULT_TYPE_DESCRIPTOR)
