"""Multi-cell collage rendering.

Each occupied cell is rendered into its own intermediate surface the size
of the cell, which hard-clips the image to the cell, and then composited
onto the canvas.  Cells are painted in layout order, so overlapping cells
follow last-writer-wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from PIL import Image

from .. import config
from .collage_layouts import CollageLayout
from .encoder import ExportFormat
from .geometry import FitMode, ObjectTransform, Rect, fit_rect
from .image_operations import draw_over, draw_scaled, new_canvas

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CellImage:
    """Binds one decoded image to one layout cell.

    ``position_x``/``position_y`` are pixel offsets from the centre of the
    cell, not of the canvas.
    """

    cell_id: str
    image: Image.Image
    scale: float = 1.0
    position_x: float = 0.0
    position_y: float = 0.0
    has_transparency: bool = False


def cell_draw_rect(cell_image: CellImage, cell_width: float, cell_height: float) -> Rect:
    """Return the ``contain`` draw rect of a bound image inside its cell."""
    image = cell_image.image
    centred = fit_rect(
        image.width,
        image.height,
        cell_width,
        cell_height,
        FitMode.CONTAIN,
        ObjectTransform(scale=cell_image.scale),
    )
    return Rect(
        centred.x + cell_image.position_x,
        centred.y + cell_image.position_y,
        centred.width,
        centred.height,
    )


def render_cell(cell_image: CellImage, cell_width: float, cell_height: float) -> Image.Image:
    """Render ``cell_image`` onto a transparent surface exactly the cell's size."""
    bounds = Rect(0, 0, cell_width, cell_height).require_drawable("cell")
    _, _, right, bottom = bounds.to_box()
    surface = new_canvas(right, bottom)
    draw_scaled(surface, cell_image.image, cell_draw_rect(cell_image, cell_width, cell_height))
    return surface


def preserves_transparency(
    cell_images: Mapping[str, CellImage],
    export_format: ExportFormat | str,
) -> bool:
    """Return ``True`` when the collage canvas may stay transparent.

    Only a lossless export where every bound image reports transparency
    qualifies; a single opaque image forces the white fill.
    """
    if ExportFormat.parse(export_format) is not ExportFormat.PNG:
        return False
    return bool(cell_images) and all(ci.has_transparency for ci in cell_images.values())


def render_collage(
    layout: CollageLayout,
    cell_images: Mapping[str, CellImage],
    export_format: ExportFormat | str = ExportFormat.JPEG,
) -> Image.Image:
    """
    Composite every bound cell image into one canvas.

    Args:
        layout: Layout giving canvas size, gap and cells.
        cell_images: Bound images keyed by cell id. Cells without a binding
            stay unpainted.
        export_format: Intended export format; decides the background policy.

    Returns:
        Image.Image: ``RGBA`` canvas of ``layout.canvas_width x layout.canvas_height``.
    """
    bound = {cid: ci for cid, ci in cell_images.items() if cid in layout.cell_ids}
    transparent = preserves_transparency(bound, export_format)
    fill: Optional[tuple[int, ...]] = None if transparent else config.MATTE_COLOR
    canvas = new_canvas(layout.canvas_width, layout.canvas_height, fill)

    for cell in layout.cells:
        cell_image = bound.get(cell.id)
        if cell_image is None:
            continue
        bounds = layout.cell_bounds(cell)
        surface = render_cell(cell_image, bounds.width, bounds.height)
        left, top, _, _ = bounds.to_box()
        draw_over(canvas, surface, left, top)

    LOGGER.debug(
        "Rendered collage %s (%dx%d, %d of %d cells, transparent=%s)",
        layout.name,
        layout.canvas_width,
        layout.canvas_height,
        len(bound),
        len(layout.cells),
        transparent,
    )
    return canvas


__all__ = [
    "CellImage",
    "cell_draw_rect",
    "render_cell",
    "preserves_transparency",
    "render_collage",
]
