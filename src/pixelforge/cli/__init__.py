"""
Command-line interface for pixelforge.

This package contains CLI implementations using Click.
Uses the public API: from pixelforge import ...
"""

from pixelforge.cli.commands import cli, main

__all__ = ["cli", "main"]
