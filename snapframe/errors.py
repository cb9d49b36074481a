"""Error taxonomy for the imaging core.

Every core operation either returns a complete result or raises one of the
exceptions below.  Budget misses during export are *not* errors; they are
reported on :class:`snapframe.imaging.encoder.EncodeResult`.
"""

from __future__ import annotations


class SnapframeError(Exception):
    """Base class for all snapframe failures."""


class InvalidGeometryError(SnapframeError, ValueError):
    """Raised for degenerate rects, sizes, aspect ratios or settings."""


class RenderContextError(SnapframeError):
    """Raised when a drawing surface cannot be allocated."""


class ImageDecodeError(SnapframeError):
    """Raised when input bytes cannot be decoded into an image."""


class BackgroundRemovalError(SnapframeError):
    """Raised when the background-removal collaborator fails."""


__all__ = [
    "SnapframeError",
    "InvalidGeometryError",
    "RenderContextError",
    "ImageDecodeError",
    "BackgroundRemovalError",
]
