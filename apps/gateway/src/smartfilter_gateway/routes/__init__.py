"""Gateway HTTP routes."""

from .photos import photos_bp

__all__ = ["photos_bp"]
