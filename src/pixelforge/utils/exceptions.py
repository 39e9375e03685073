"""
Custom exceptions for pixelforge.

This module defines all custom exceptions used throughout the application.
"""


class PixelforgeError(Exception):
    """Base exception for all pixelforge errors."""

    pass


class ValidationError(PixelforgeError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class ConfigurationError(PixelforgeError):
    """Raised when there is a configuration problem (e.g. missing API key)."""

    pass


class GenerationInProgressError(PixelforgeError):
    """Raised when a generation is submitted while another one is still pending."""

    pass


class TransportError(PixelforgeError):
    """Raised when the call to the image API fails for any reason."""

    pass


class APIError(TransportError):
    """Raised when the API answers with an error status or an unreadable body."""

    def __init__(self, message: str, status_code: int = 0, response: str = "") -> None:
        """
        Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response: Raw API response (if available)
        """
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class NetworkError(TransportError):
    """Raised when a network operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize network error.

        Args:
            message: Error message
            original_error: The underlying exception that caused this error
        """
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(TransportError):
    """Raised when the API request times out."""

    pass


class EmptyResponseError(PixelforgeError):
    """Raised when the API response contains no content parts."""

    pass


class NoImageFoundError(PixelforgeError):
    """Raised when the API response has parts but none of them carries image data."""

    def __init__(self, message: str, text: str = "") -> None:
        """
        Initialize no-image error.

        Args:
            message: Error message
            text: Concatenated text parts of the response, if any
        """
        self.text = text
        super().__init__(message)


class PersistenceParseError(PixelforgeError):
    """Raised when stored history cannot be parsed."""

    pass


class ImageProcessingError(PixelforgeError):
    """Raised when a reference image cannot be loaded or encoded."""

    def __init__(self, message: str, image_path: str = "") -> None:
        """
        Initialize image processing error.

        Args:
            message: Error message
            image_path: Path to the image that caused the error
        """
        self.image_path = image_path
        super().__init__(message)
