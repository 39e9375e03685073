"""
Utility functions for the CLI.

This module contains helper functions used by CLI commands,
such as output paths, timestamps, and exit code constants.
"""

from datetime import datetime
from pathlib import Path

from pixelforge.core.history import GeneratedResult

# Exit codes
EXIT_SUCCESS = 0
EXIT_API_OR_NETWORK = 1
EXIT_VALIDATION_OR_CONFIG = 2
EXIT_PERSISTENCE_OR_BUSY = 3


def default_output_path(result: GeneratedResult) -> Path:
    """Return default output path: pixelforge-<id>.<ext> in current directory."""
    return Path(result.download_filename)


def format_timestamp(created_at: int) -> str:
    """Format a millisecond epoch timestamp as local YYYY-MM-DD HH:MM:SS."""
    return datetime.fromtimestamp(created_at / 1000).strftime("%Y-%m-%d %H:%M:%S")


__all__ = [
    "EXIT_SUCCESS",
    "EXIT_API_OR_NETWORK",
    "EXIT_VALIDATION_OR_CONFIG",
    "EXIT_PERSISTENCE_OR_BUSY",
    "default_output_path",
    "format_timestamp",
]
