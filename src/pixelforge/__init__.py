"""
pixelforge - Game sprite generation with a generative image API

A Python package for generating game-ready sprites (characters, sprite sheets,
item icons, portraits, tilesets) with Gemini image models, keeping a local
history of results that can be reused as references for animations and
variations.

Library usage:
- Configuration can be passed per operation (e.g. generate_sprite(..., config=my_config))
  or via the shared config: use get_config() / set_config() and omit the config argument.
- History lives in a Session backed by a KeyValueStorage; JsonFileStorage keeps it in
  ~/.pixelforge/storage.json (or PIXELFORGE_STORAGE_PATH).
- Logging: control verbosity with set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  PIXELFORGE_VERBOSITY env (0/1/2) is read when the CLI runs or when logging is configured.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pixelforge")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from pixelforge.core.config import (
    DEFAULT_GEMINI_BASE_URL,
    DEFAULT_IMAGE_MODEL,
    Config,
    get_config,
    set_config,
)
from pixelforge.core.history import GeneratedResult, save_result_image
from pixelforge.core.image_gen import generate_sprite
from pixelforge.core.prompt import BACKGROUND_PRESETS, DEFAULT_BACKGROUND, validate_prompt
from pixelforge.core.reference import load_reference_image
from pixelforge.core.request import GenerationRequest
from pixelforge.core.session import Session, SessionStatus
from pixelforge.core.storage import JsonFileStorage, MemoryStorage
from pixelforge.core.styles import ArtStyle, SpriteType
from pixelforge.logging_config import configure_logging, set_verbosity
from pixelforge.utils.exceptions import (
    APIError,
    ConfigurationError,
    EmptyResponseError,
    GenerationInProgressError,
    ImageProcessingError,
    NetworkError,
    NoImageFoundError,
    PersistenceParseError,
    PixelforgeError,
    RequestTimeoutError,
    TransportError,
    ValidationError,
)

__all__ = [
    "APIError",
    "ArtStyle",
    "BACKGROUND_PRESETS",
    "configure_logging",
    "Config",
    "ConfigurationError",
    "DEFAULT_BACKGROUND",
    "DEFAULT_GEMINI_BASE_URL",
    "DEFAULT_IMAGE_MODEL",
    "EmptyResponseError",
    "GeneratedResult",
    "GenerationInProgressError",
    "GenerationRequest",
    "ImageProcessingError",
    "JsonFileStorage",
    "MemoryStorage",
    "NetworkError",
    "NoImageFoundError",
    "PersistenceParseError",
    "PixelforgeError",
    "RequestTimeoutError",
    "Session",
    "SessionStatus",
    "SpriteType",
    "TransportError",
    "ValidationError",
    "generate_sprite",
    "get_config",
    "load_reference_image",
    "save_result_image",
    "set_config",
    "set_verbosity",
    "validate_prompt",
]
