"""
Load instruction templates and UI suggestions from the bundled prompts.yaml file.

Prompts are defined in src/pixelforge/prompts.yaml and loaded once per process.
"""

import importlib.resources
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from pixelforge.utils.exceptions import ConfigurationError

# Module-level cache for parsed prompts
_prompts_data: "PromptsSchema | None" = None

_FRESH_PLACEHOLDERS = ("{prompt}", "{style}", "{type}", "{background}")
_REFERENCE_PLACEHOLDERS = ("{prompt}", "{type}", "{background}")


class SpriteTemplates(BaseModel):
    """Schema for the sprite instruction templates."""

    fresh: str = Field(..., min_length=1, description="Template for a new asset")
    reference: str = Field(
        ..., min_length=1, description="Template for a new pose of a referenced character"
    )

    @field_validator("fresh")
    @classmethod
    def _fresh_placeholders(cls, value: str) -> str:
        missing = [p for p in _FRESH_PLACEHOLDERS if p not in value]
        if missing:
            raise ValueError(f"missing placeholders {', '.join(missing)}")
        return value

    @field_validator("reference")
    @classmethod
    def _reference_placeholders(cls, value: str) -> str:
        missing = [p for p in _REFERENCE_PLACEHOLDERS if p not in value]
        if missing:
            raise ValueError(f"missing placeholders {', '.join(missing)}")
        if "{style}" in value:
            raise ValueError("must not contain {style}; the reference image sets the style")
        return value


class Suggestions(BaseModel):
    """Quick-fill prompts shown in the UI."""

    fresh: list[str] = Field(default_factory=list)
    reference: list[str] = Field(default_factory=list)


class PromptsSchema(BaseModel):
    """Schema for prompts.yaml."""

    model_config = {"extra": "allow"}

    sprite: SpriteTemplates
    suggestions: Suggestions = Field(default_factory=Suggestions)


def _parse_prompts(raw: str) -> PromptsSchema:
    """Parse and validate prompts.yaml text.

    Raises:
        ConfigurationError: If YAML is malformed or fails validation.
    """
    try:
        data: Any = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse prompts.yaml: {e}. Check YAML syntax and formatting."
        ) from e

    if data is None:
        raise ConfigurationError("prompts.yaml is empty. Expected a 'sprite' section.")

    try:
        return PromptsSchema(**data)
    except ValidationError as e:
        errors = "\n".join(
            f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid prompts.yaml structure:\n{errors}") from e


def load_prompts() -> PromptsSchema:
    """Load prompts.yaml from the package. Cached after first call.

    Raises:
        ConfigurationError: If the file is missing, malformed, or fails validation.
    """
    global _prompts_data
    if _prompts_data is not None:
        return _prompts_data

    try:
        with importlib.resources.files("pixelforge").joinpath("prompts.yaml").open(
            encoding="utf-8"
        ) as f:
            raw = f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(
            "prompts.yaml not found. This file is required and should be bundled with the package."
        ) from e

    _prompts_data = _parse_prompts(raw)
    return _prompts_data


def get_fresh_template() -> str:
    """Return the template used for a new asset."""
    return load_prompts().sprite.fresh


def get_reference_template() -> str:
    """Return the template used when a reference image is attached."""
    return load_prompts().sprite.reference


def get_suggestions(with_reference: bool) -> list[str]:
    """Return UI quick-fill prompts for the fresh or reference flow."""
    suggestions = load_prompts().suggestions
    return list(suggestions.reference if with_reference else suggestions.fresh)
