"""
Core modules for pixelforge.

This package contains the core business logic for:
- Configuration management
- Request building and response extraction
- Sprite generation against the image API
- History persistence and session state
"""
