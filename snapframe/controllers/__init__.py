"""Session controllers for the single-image editor and the collage editor."""

from .collage import CollageSession
from .editor import ImageEditorSession
from .history import EditHistory, RedoUnavailableError

__all__ = [
    "CollageSession",
    "EditHistory",
    "ImageEditorSession",
    "RedoUnavailableError",
]
