"""
Client protocol for image generation.

Defines the interface the generation entry point and the session depend on,
so a live API client can be swapped for a fake in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pixelforge.core.request import GenerationPayload


class ImageGenerationClient(Protocol):
    """Protocol for image generation clients.

    Clients send a built payload to a backend and return the parsed JSON
    response unchanged; image extraction happens in pixelforge.core.response.
    """

    def generate_content(self, payload: GenerationPayload) -> dict[str, Any]:
        """Send the payload and return the parsed response body.

        May raise APIError, NetworkError, or RequestTimeoutError.
        """
        ...
