"""
Gemini image generation client.

Handles HTTP communication with the Gemini generateContent REST endpoint.
"""

import json
import time
from typing import Any

import requests

from pixelforge.core.config import Config
from pixelforge.core.request import GenerationPayload
from pixelforge.logging_config import get_logger
from pixelforge.utils.exceptions import (
    APIError,
    ConfigurationError,
    NetworkError,
    RequestTimeoutError,
)

logger = get_logger(__name__)

_DEBUG_TRUNCATE_THRESHOLD = 200
_DEBUG_NEVER_TRUNCATE_KEYS = frozenset({"text", "message"})


def _truncate_image_data_for_log(obj: Any, parent_key: str | None = None) -> Any:
    """Recursively replace long base64 strings with placeholders for safe logging."""
    if isinstance(obj, dict):
        return {k: _truncate_image_data_for_log(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_truncate_image_data_for_log(v, None) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        if parent_key in _DEBUG_NEVER_TRUNCATE_KEYS:
            return obj
        return f"<string, {len(obj)} chars>"
    return obj


def _api_error_message(response: requests.Response) -> str:
    """Return error.message from a Gemini error body, or the raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.text


class GeminiClient:
    """Client for the Gemini generateContent API. One instance per application."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: int | None = None,
        debug_api: bool = False,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                "API Key is missing. Please check your environment configuration."
            )
        self._api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.debug_api = debug_api

    @classmethod
    def from_config(cls, config: Config) -> "GeminiClient":
        """Build a client from configuration. Raises ConfigurationError without an API key."""
        return cls(
            api_key=config.gemini_api_key,
            model=config.image_model,
            base_url=config.gemini_base_url,
            timeout=config.generation_timeout,
            debug_api=config.debug_api,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _raise_for_status(self, response: requests.Response) -> None:
        """Map non-200 status codes to APIError with the API's own message."""
        status = response.status_code
        if status == 200:
            return
        detail = _api_error_message(response)
        if status == 400:
            message = f"Request rejected by the API: {detail}"
        elif status in (401, 403):
            message = f"Authentication failed. Please check your Gemini API key. {detail}"
        elif status == 404:
            message = f"Model not found or endpoint unavailable: {self.model}"
        elif status == 429:
            message = "Rate limit exceeded. Please wait before making more requests."
        elif status >= 500:
            message = f"Gemini service error: {status}"
        else:
            message = f"API request failed with status {status}: {detail}"
        raise APIError(message.strip(), status_code=status, response=response.text)

    def _log_debug_body(self, label: str, body: Any) -> None:
        logger.info(
            "%s (image data truncated): %s",
            label,
            json.dumps(_truncate_image_data_for_log(body), indent=2, default=str),
        )

    def generate_content(self, payload: GenerationPayload) -> dict[str, Any]:
        """
        POST the payload and return the parsed JSON response.

        Raises:
            APIError: Non-200 status or a body that is not JSON
            RequestTimeoutError: The request timed out
            NetworkError: Connection or other transport failure
        """
        body = payload.to_wire()
        headers = {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }
        logger.debug("API request url=%s timeout=%s", self.url, self.timeout)
        if self.debug_api:
            self._log_debug_body("API request payload", body)

        start_time = time.time()
        try:
            response = requests.post(self.url, headers=headers, json=body, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Request timed out after {self.timeout} seconds. "
                "The generation may be taking longer than expected."
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(
                "Failed to connect to the Gemini API. Please check your internet connection.",
                original_error=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Network error during API request: {str(e)}", original_error=e
            ) from e

        elapsed = time.time() - start_time
        logger.debug(
            "API response status=%s content_type=%s time=%.2fs",
            response.status_code,
            response.headers.get("content-type", ""),
            elapsed,
        )
        self._raise_for_status(response)

        try:
            result = response.json()
        except ValueError as e:
            raise APIError(
                f"Failed to parse API response as JSON: {str(e)}",
                status_code=response.status_code,
                response=response.text,
            ) from e
        if self.debug_api:
            self._log_debug_body("API response", result)
        if not isinstance(result, dict):
            raise APIError("Unexpected API response shape", response=response.text)
        return result
