"""
Prompt validation and instruction text for sprite generation.

The instruction text sent to the model is built from the user's prompt, the
style and sprite type descriptors, and a background clause, using the
templates in prompts.yaml.
"""

from pixelforge.core.prompts_loader import get_fresh_template, get_reference_template
from pixelforge.core.styles import ArtStyle, SpriteType, describe_style, describe_type
from pixelforge.utils.exceptions import ValidationError

# Background presets offered by the UI: label -> color token
BACKGROUND_PRESETS: dict[str, str] = {
    "Dark": "Black",
    "Light": "White",
    "Green": "#00FF00",
    "Blue": "#0000FF",
}
DEFAULT_BACKGROUND = "#202020"


def validate_prompt(prompt: str) -> None:
    """
    Validate a text prompt.

    Raises:
        ValidationError: If the prompt is empty or whitespace only
    """
    if not prompt or not prompt.strip():
        raise ValidationError("Prompt cannot be empty", field="prompt")


def background_clause(color: str | None) -> str:
    """Return the background instruction for a color token (empty means unspecified)."""
    if color and color.strip():
        return (
            f"The background must be a solid, flat color: {color.strip()}. "
            "Do not use gradients or detailed backgrounds. The subject must be clearly isolated."
        )
    return "The background must be a solid white or black color for easy removal."


def resolve_background(value: str | None) -> str:
    """Map a preset label (case-insensitive) to its color token; other values pass through."""
    if not value or not value.strip():
        return ""
    for label, color in BACKGROUND_PRESETS.items():
        if value.strip().lower() == label.lower():
            return color
    return value.strip()


def build_instructions(
    prompt: str,
    style: ArtStyle | str,
    sprite_type: SpriteType | str,
    background: str | None,
    with_reference: bool,
) -> str:
    """
    Build the instruction text for one generation.

    With a reference image the style descriptor is left out; the model is told
    to keep the reference's style and only change pose or action.
    """
    if with_reference:
        return get_reference_template().format(
            prompt=prompt.strip(),
            type=describe_type(sprite_type),
            background=background_clause(background),
        ).strip()
    return get_fresh_template().format(
        prompt=prompt.strip(),
        style=describe_style(style),
        type=describe_type(sprite_type),
        background=background_clause(background),
    ).strip()
