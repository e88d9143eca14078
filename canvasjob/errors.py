from __future__ import annotations


class CanvasJobError(Exception):
    """Base class for every error raised by canvasjob."""


class ConfigurationError(CanvasJobError):
    """Invalid sizes, missing destination path or missing font file."""


class ResourceError(CanvasJobError):
    """A source image is required but none could be obtained."""


class ImageIOError(CanvasJobError):
    """Decoding or encoding failed in the codec backend."""
