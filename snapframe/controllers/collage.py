"""Collage editing session: one layout, at most one image per cell."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from PIL import Image

from .. import config
from ..imaging.collage_layouts import CollageLayout, CollageLayouts
from ..imaging.collage_renderer import CellImage, render_collage
from ..imaging.encoder import EncodeResult, ExportFormat, ExportSettings, encode_export
from ..imaging.geometry import clamp_scale, match_aspect
from ..imaging.transparency import has_transparency

LOGGER = logging.getLogger(__name__)


class CollageSession:
    """Holds the active layout and the cell-to-image bindings."""

    def __init__(
        self,
        layout_name: str = config.DEFAULT_LAYOUT,
        canvas_width: int = config.DEFAULT_CANVAS_WIDTH,
        canvas_height: int = config.DEFAULT_CANVAS_HEIGHT,
    ) -> None:
        self._template = CollageLayouts.get_layout(layout_name)
        self.layout: CollageLayout = self._template.with_canvas(canvas_width, canvas_height)
        self._cells: Dict[str, CellImage] = {}

    @property
    def cell_images(self) -> Dict[str, CellImage]:
        return dict(self._cells)

    def select_layout(self, name: str) -> CollageLayout:
        """Switch template; all cell bindings are discarded."""
        self._template = CollageLayouts.get_layout(name)
        self.layout = self._template.with_canvas(self.layout.canvas_width, self.layout.canvas_height)
        self._cells.clear()
        return self.layout

    def set_canvas_size(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        *,
        maintain_aspect: bool = False,
    ) -> CollageLayout:
        """Resize the canvas; with ``maintain_aspect`` only one edge is needed."""
        if maintain_aspect:
            aspect = self.layout.canvas_width / self.layout.canvas_height
            width, height = match_aspect(aspect, width=width, height=height)
        if width is None or height is None:
            raise ValueError("width and height are required")
        self.layout = self.layout.with_canvas(width, height)
        return self.layout

    def assign_image(self, cell_id: str, image: Image.Image) -> CellImage:
        """Bind ``image`` to ``cell_id``, replacing any previous binding and its pan/zoom."""
        self.layout.get_cell(cell_id)
        binding = CellImage(cell_id, image, has_transparency=has_transparency(image))
        self._cells[cell_id] = binding
        LOGGER.debug("Bound %sx%s image to %s", *image.size, cell_id)
        return binding

    def remove_image(self, cell_id: str) -> None:
        self._cells.pop(cell_id, None)

    def _binding(self, cell_id: str) -> CellImage:
        try:
            return self._cells[cell_id]
        except KeyError:
            raise KeyError(f"No image bound to cell '{cell_id}'") from None

    def pan(self, cell_id: str, dx: float, dy: float) -> CellImage:
        binding = self._binding(cell_id)
        binding.position_x += dx
        binding.position_y += dy
        return binding

    def zoom(self, cell_id: str, delta: float) -> CellImage:
        binding = self._binding(cell_id)
        binding.scale = clamp_scale(
            binding.scale + delta, config.CELL_SCALE_MIN, config.CELL_SCALE_MAX
        )
        return binding

    def set_scale(self, cell_id: str, scale: float) -> CellImage:
        binding = self._binding(cell_id)
        binding.scale = clamp_scale(scale, config.CELL_SCALE_MIN, config.CELL_SCALE_MAX)
        return binding

    def render(self, export_format: ExportFormat | str = ExportFormat.JPEG) -> Image.Image:
        return render_collage(self.layout, self._cells, export_format)

    def export(self, settings: Optional[ExportSettings] = None) -> EncodeResult:
        """Render and encode; JPEG at full quality unless ``settings`` say otherwise."""
        settings = settings or ExportSettings(quality=config.COLLAGE_QUALITY_DEFAULT)
        result = encode_export(self.render(settings.format), settings)
        LOGGER.info(
            "Exported %s (%d bytes, quality=%s)",
            result.filename(config.COLLAGE_EXPORT_STEM),
            result.size,
            result.quality,
        )
        return result
