"""
Extraction of the generated image from a Gemini generateContent response.
"""

from typing import Any

from pixelforge.core.reference import create_image_data_url
from pixelforge.logging_config import get_logger
from pixelforge.utils.exceptions import EmptyResponseError, NoImageFoundError

logger = get_logger(__name__)

DEFAULT_IMAGE_MIME_TYPE = "image/png"


def _response_parts(response: dict[str, Any]) -> list[Any]:
    """Return candidates[0].content.parts, or the parts of a bare content object."""
    if "parts" in response and "candidates" not in response:
        return response.get("parts") or []
    candidates = response.get("candidates") or []
    if not candidates:
        return []
    content = (candidates[0] or {}).get("content") or {}
    return content.get("parts") or []


def _inline_blob(part: Any) -> dict[str, Any] | None:
    if not isinstance(part, dict):
        return None
    blob = part.get("inlineData") or part.get("inline_data")
    return blob if isinstance(blob, dict) else None


def extract_image(response: dict[str, Any]) -> str:
    """
    Return the first inline image in the response as a data URI.

    Args:
        response: Parsed JSON body of a generateContent call

    Returns:
        "data:<mime>;base64,<data>" (mime defaults to image/png)

    Raises:
        EmptyResponseError: If the response has no content parts
        NoImageFoundError: If no part carries image bytes
    """
    parts = _response_parts(response or {})
    if not parts:
        finish_reason = ""
        candidates = (response or {}).get("candidates") or []
        if candidates and isinstance(candidates[0], dict):
            finish_reason = candidates[0].get("finishReason", "")
        logger.debug("Response had no parts finish_reason=%s", finish_reason or "-")
        raise EmptyResponseError("No content generated.")

    texts: list[str] = []
    for part in parts:
        blob = _inline_blob(part)
        if blob and blob.get("data"):
            mime_type = blob.get("mimeType") or blob.get("mime_type") or DEFAULT_IMAGE_MIME_TYPE
            return create_image_data_url(blob["data"], mime_type)
        if isinstance(part, dict) and part.get("text"):
            texts.append(part["text"])

    text = "\n".join(texts)
    if text:
        logger.info("Model answered with text only: %s", text[:500])
    raise NoImageFoundError("No image data found in the response.", text=text)
