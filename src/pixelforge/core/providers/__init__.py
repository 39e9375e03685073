"""
Image generation clients: protocol and the Gemini implementation.
"""

from pixelforge.core.providers.base import ImageGenerationClient as ImageGenerationClient
from pixelforge.core.providers.gemini import GeminiClient as GeminiClient

__all__ = ["GeminiClient", "ImageGenerationClient"]
