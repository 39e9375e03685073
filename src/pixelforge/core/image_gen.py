"""
Sprite generation: build the request, call the image API, extract the image.
"""

import time

from pixelforge.core.config import Config, get_config
from pixelforge.core.providers.base import ImageGenerationClient
from pixelforge.core.providers.gemini import GeminiClient
from pixelforge.core.request import GenerationRequest, build_payload
from pixelforge.core.response import extract_image
from pixelforge.logging_config import get_logger, log_prompt_text
from pixelforge.utils.exceptions import ConfigurationError

logger = get_logger(__name__)


def generate_sprite(
    request: GenerationRequest,
    client: ImageGenerationClient | None = None,
    config: Config | None = None,
) -> str:
    """
    Generate one sprite image.

    Args:
        request: The user's submission
        client: Client to send the request with; if None, a GeminiClient is
            built from config
        config: Optional config; if None, uses shared config from get_config()

    Returns:
        The generated image as a data URI

    Raises:
        ConfigurationError: If no client was given and the API key is missing
            (raised before any network call)
        ValidationError: If the prompt is empty
        TransportError: If the API call fails
        EmptyResponseError: If the response has no content parts
        NoImageFoundError: If no part carries image data
    """
    if client is None:
        config = config or get_config()
        if not config.gemini_api_key:
            raise ConfigurationError(
                "API Key is missing. Please check your environment configuration."
            )
        client = GeminiClient.from_config(config)

    payload = build_payload(request)

    logger.info(
        "Generating sprite style=%s type=%s has_reference=%s",
        request.style.value,
        request.type.value,
        request.has_reference,
    )
    log_prompt_text(logger, "Prompt", request.prompt)
    log_prompt_text(logger, "Instructions", payload.text)

    start_time = time.time()
    response = client.generate_content(payload)
    image_url = extract_image(response)
    logger.info("Generated in %.1fs", time.time() - start_time)
    return image_url
