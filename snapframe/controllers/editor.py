"""Single-image editing session.

The session owns the current image and its linear history.  Each editing
step renders a new image from the current one and pushes it; nothing is
modified in place.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image

from .. import config
from ..imaging.encoder import EncodeResult, ExportSettings, encode_export
from ..imaging.geometry import FitMode, ObjectTransform, aspect_ratio, fit_rect, match_aspect
from ..imaging.image_operations import ColorValue, PixelCrop, crop_image, resize_canvas
from ..imaging.image_processor import ImageLoader
from ..services.background import BackgroundRemover, remove_background
from .history import EditHistory

LOGGER = logging.getLogger(__name__)


class NoImageLoadedError(RuntimeError):
    """Raised when an edit is requested before an image is loaded."""


class ImageEditorSession:
    """Crop, resize, background removal and export of one image."""

    def __init__(self, loader: Optional[ImageLoader] = None) -> None:
        self._loader = loader or ImageLoader()
        self._history: Optional[EditHistory[Image.Image]] = None

    @property
    def history(self) -> EditHistory[Image.Image]:
        if self._history is None:
            raise NoImageLoadedError("No image has been loaded")
        return self._history

    @property
    def current(self) -> Image.Image:
        return self.history.current

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.current.size

    @property
    def aspect(self) -> float:
        return aspect_ratio(*self.current.size)

    def load_image(self, image: Image.Image) -> Image.Image:
        """Start a new session from an already decoded image."""
        self._history = EditHistory(image)
        return image

    def load_bytes(self, data: bytes) -> Image.Image:
        return self.load_image(self._loader.decode(data))

    def load_path(self, path: Union[str, Path]) -> Image.Image:
        return self.load_image(self._loader.load(path))

    def crop(self, crop: PixelCrop, background: Optional[ColorValue] = None) -> Image.Image:
        return self.history.push(crop_image(self.current, crop, background))

    def target_size(
        self, *, width: Optional[int] = None, height: Optional[int] = None
    ) -> tuple[int, int]:
        """Complete a target size from one edge at the current aspect ratio."""
        return match_aspect(self.aspect, width=width, height=height)

    def object_rect(
        self,
        width: int,
        height: int,
        mode: FitMode | str = FitMode.CONTAIN,
        transform: Optional[ObjectTransform] = None,
    ):
        """Where the current image would be drawn on a ``width x height`` canvas."""
        return fit_rect(*self.current.size, width, height, mode, transform)

    def resize(
        self,
        width: int,
        height: int,
        mode: FitMode | str = FitMode.CONTAIN,
        background: Optional[ColorValue] = config.DEFAULT_BACKGROUND,
        transform: Optional[ObjectTransform] = None,
    ) -> Image.Image:
        return self.history.push(
            resize_canvas(self.current, width, height, mode, background, transform)
        )

    def remove_background(self, remover: Optional[BackgroundRemover] = None) -> Image.Image:
        return self.history.push(remove_background(self.current, remover))

    def undo(self) -> Image.Image:
        return self.history.undo()

    def redo(self) -> Image.Image:
        return self.history.redo()

    def export(self, settings: Optional[ExportSettings] = None) -> EncodeResult:
        settings = settings or ExportSettings(quality=config.EDITOR_QUALITY_DEFAULT)
        result = encode_export(self.current, settings)
        LOGGER.info(
            "Exported %s (%d bytes, quality=%s)",
            result.filename(config.EDITOR_EXPORT_STEM),
            result.size,
            result.quality,
        )
        return result
