"""
Error handling for the CLI.

This module maps library exceptions to exit codes and user messages, and
runs command bodies so known errors end the process with the right code.
"""

import sys
from collections.abc import Callable

import click

from pixelforge import (
    ConfigurationError,
    EmptyResponseError,
    GenerationInProgressError,
    ImageProcessingError,
    NoImageFoundError,
    PersistenceParseError,
    PixelforgeError,
    TransportError,
    ValidationError,
)
from pixelforge.cli import progress
from pixelforge.cli.utils import (
    EXIT_API_OR_NETWORK,
    EXIT_PERSISTENCE_OR_BUSY,
    EXIT_VALIDATION_OR_CONFIG,
)


def map_exception_to_exit(exc: BaseException) -> tuple[int, str]:
    """Map library and known exceptions to (exit_code, user_message)."""
    if isinstance(exc, ValidationError):
        msg = exc.args[0] if exc.args else "Validation failed."
        if getattr(exc, "field", None):
            msg = f"{msg} (field: {exc.field})"
        return (EXIT_VALIDATION_OR_CONFIG, msg)
    if isinstance(exc, ConfigurationError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Invalid configuration.")
    if isinstance(exc, ImageProcessingError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Image processing failed.")
    if isinstance(exc, FileNotFoundError):
        return (EXIT_VALIDATION_OR_CONFIG, str(exc))
    if isinstance(exc, (PersistenceParseError, GenerationInProgressError)):
        return (EXIT_PERSISTENCE_OR_BUSY, exc.args[0] if exc.args else "History is unavailable.")
    if isinstance(exc, TransportError):
        return (EXIT_API_OR_NETWORK, exc.args[0] if exc.args else "API or network error.")
    if isinstance(exc, (EmptyResponseError, NoImageFoundError)):
        return (EXIT_API_OR_NETWORK, exc.args[0] if exc.args else "No image was generated.")
    if isinstance(exc, PixelforgeError):
        return (EXIT_API_OR_NETWORK, exc.args[0] if exc.args else "An error occurred.")
    # Unhandled
    return (EXIT_API_OR_NETWORK, str(exc) if exc.args else "An unexpected error occurred.")


def _report(msg: str, quiet: bool) -> None:
    if quiet:
        click.echo(msg, err=True)
    else:
        progress.print_error(msg)


def run_with_error_handling(
    fn: Callable[[], None],
    *,
    quiet: bool = False,
    debug: bool = False,
) -> None:
    """
    Run fn(); on exception map to exit code and message, print and sys.exit.
    Used so command bodies stay free of try/except for known errors.
    """
    try:
        fn()
    except (PixelforgeError, FileNotFoundError) as e:
        code, msg = map_exception_to_exit(e)
        _report(msg, quiet)
        sys.exit(code)
    except Exception as e:
        if debug:
            raise
        _code, msg = map_exception_to_exit(e)
        _report(msg, quiet)
        sys.exit(EXIT_API_OR_NETWORK)


__all__ = [
    "map_exception_to_exit",
    "run_with_error_handling",
]
