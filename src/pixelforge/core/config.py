"""
Configuration management for pixelforge.

This module handles the Gemini API key, model selection, the history storage
location, and other settings.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from pixelforge.logging_config import get_logger
from pixelforge.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

# Default configuration constants
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_ASPECT_RATIO = "1:1"
DEFAULT_STORAGE_PATH = Path.home() / ".pixelforge" / "storage.json"

# Checked in order; the first non-empty one wins
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


def _api_key_from_env() -> str:
    for name in API_KEY_ENV_VARS:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return ""


@dataclass
class Config:
    """Configuration for the pixelforge application."""

    # API Configuration (gemini_api_key excluded from repr to avoid leaking secrets)
    gemini_api_key: str = field(default="", repr=False)
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL

    # Model Configuration
    image_model: str = DEFAULT_IMAGE_MODEL

    # Seconds; None leaves the request without a timeout (transport default)
    generation_timeout: int | None = None

    # Local key/value store holding the history entry
    storage_path: Path = DEFAULT_STORAGE_PATH

    # Debug: log raw API payload/response with image data truncated
    debug_api: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Environment variables:
            GEMINI_API_KEY: Required for generation (GOOGLE_API_KEY and API_KEY
                are accepted as fallbacks)
            PIXELFORGE_IMAGE_MODEL: Optional Gemini image model
            PIXELFORGE_BASE_URL: Optional API base URL
            PIXELFORGE_GENERATION_TIMEOUT: Optional request timeout in seconds
            PIXELFORGE_STORAGE_PATH: Optional path of the local storage file
            PIXELFORGE_DEBUG_API: Log truncated request/response bodies when 1/true/yes

        Returns:
            Config instance populated from environment

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        raw_timeout = os.getenv("PIXELFORGE_GENERATION_TIMEOUT", "").strip()
        timeout: int | None = None
        if raw_timeout:
            try:
                timeout = int(raw_timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"PIXELFORGE_GENERATION_TIMEOUT must be an integer, got {raw_timeout!r}."
                ) from e

        storage_path = os.getenv("PIXELFORGE_STORAGE_PATH", "").strip()
        debug_api = os.getenv("PIXELFORGE_DEBUG_API", "").strip().lower() in ("1", "true", "yes")

        return cls(
            gemini_api_key=_api_key_from_env(),
            gemini_base_url=os.getenv("PIXELFORGE_BASE_URL", "").strip() or DEFAULT_GEMINI_BASE_URL,
            image_model=os.getenv("PIXELFORGE_IMAGE_MODEL", "").strip() or DEFAULT_IMAGE_MODEL,
            generation_timeout=timeout,
            storage_path=Path(storage_path).expanduser() if storage_path else DEFAULT_STORAGE_PATH,
            debug_api=debug_api,
        )

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        logger.debug("Validating config")

        if not self.gemini_api_key:
            raise ConfigurationError(
                "API Key is missing. Set GEMINI_API_KEY in your environment or .env file."
            )
        if not self.image_model:
            raise ConfigurationError("Image model cannot be empty.")
        if self.generation_timeout is not None and self.generation_timeout <= 0:
            raise ConfigurationError(
                f"generation_timeout must be positive, got {self.generation_timeout}."
            )

    def set_api_key(self, api_key: str) -> None:
        """
        Set the Gemini API key.

        Raises:
            ConfigurationError: If the key is empty
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError("API key cannot be empty")

        self.gemini_api_key = api_key.strip()

    def set_image_model(self, model: str) -> None:
        """
        Set the Gemini image model.

        Raises:
            ConfigurationError: If model is empty
        """
        if not model:
            raise ConfigurationError("Model ID cannot be empty")

        self.image_model = model


# Global configuration instance
_global_config: Config | None = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        The global Config instance
    """
    global _global_config
    if _global_config is None:
        _global_config = Config.from_env()
    return _global_config


def set_config(config: Config) -> None:
    """
    Set the global configuration instance.

    Args:
        config: The Config instance to use globally
    """
    global _global_config
    _global_config = config
