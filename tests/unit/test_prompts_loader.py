"""Unit tests for prompts loader (bundled prompts.yaml)."""

import pytest

from pixelforge.core.prompts_loader import (
    _parse_prompts,
    get_fresh_template,
    get_reference_template,
    get_suggestions,
    load_prompts,
)
from pixelforge.utils.exceptions import ConfigurationError

_VALID = """
sprite:
  fresh: "{prompt} {style} {type} {background}"
  reference: "{prompt} {type} {background}"
"""


@pytest.mark.unit
class TestLoadPrompts:
    def test_bundled_file_loads(self):
        data = load_prompts()
        assert data.sprite.fresh
        assert data.sprite.reference

    def test_cached(self):
        assert load_prompts() is load_prompts()

    def test_fresh_template_placeholders(self):
        template = get_fresh_template()
        for placeholder in ("{prompt}", "{style}", "{type}", "{background}"):
            assert placeholder in template

    def test_reference_template_has_no_style(self):
        template = get_reference_template()
        assert "{style}" not in template
        assert "EXACT SAME character" in template

    def test_suggestions(self):
        fresh = get_suggestions(False)
        reference = get_suggestions(True)
        assert len(fresh) == 4
        assert len(reference) == 4
        assert "Walking cycle side view" in reference
        assert "Cute slime monster, blue, happy expression" in fresh

    def test_suggestions_returns_copy(self):
        get_suggestions(False).append("extra")
        assert "extra" not in get_suggestions(False)


@pytest.mark.unit
class TestParsePrompts:
    def test_valid(self):
        data = _parse_prompts(_VALID)
        assert data.suggestions.fresh == []

    def test_empty_raises(self):
        with pytest.raises(ConfigurationError):
            _parse_prompts("")

    def test_malformed_yaml_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            _parse_prompts("sprite: [unclosed")
        assert "Failed to parse" in str(exc_info.value)

    def test_missing_placeholder_raises(self):
        raw = """
sprite:
  fresh: "{prompt} {style} {type}"
  reference: "{prompt} {type} {background}"
"""
        with pytest.raises(ConfigurationError) as exc_info:
            _parse_prompts(raw)
        assert "{background}" in str(exc_info.value)

    def test_reference_with_style_raises(self):
        raw = """
sprite:
  fresh: "{prompt} {style} {type} {background}"
  reference: "{prompt} {style} {type} {background}"
"""
        with pytest.raises(ConfigurationError):
            _parse_prompts(raw)

    def test_missing_sprite_section_raises(self):
        with pytest.raises(ConfigurationError):
            _parse_prompts("suggestions: {}")
