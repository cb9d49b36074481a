"""Raster operations shared by the editor and the collage renderer.

Functions here never mutate their inputs.  Every drawing step is a
source-over composite onto an ``RGBA`` surface; anything drawn outside the
destination is clipped by the destination's own bounds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from PIL import Image, ImageColor

from .. import config
from ..errors import InvalidGeometryError, RenderContextError
from .geometry import FitMode, ObjectTransform, Rect, fit_rect

LOGGER = logging.getLogger(__name__)

ColorValue = Union[str, tuple[int, ...]]
TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True, slots=True)
class PixelCrop:
    """Crop rectangle in source-image pixel space."""

    x: float
    y: float
    width: float
    height: float

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


def parse_color(color: Optional[ColorValue]) -> tuple[int, int, int, int]:
    """Return an RGBA tuple for ``color``.

    ``None`` and ``"transparent"`` both mean fully transparent.  Strings go
    through :func:`PIL.ImageColor.getcolor`; 3-tuples get an opaque alpha.
    """
    if color is None:
        return TRANSPARENT
    if isinstance(color, str):
        if color.strip().lower() == "transparent":
            return TRANSPARENT
        return ImageColor.getcolor(color, "RGBA")
    channels = tuple(int(c) for c in color)
    if len(channels) == 3:
        return channels + (255,)
    if len(channels) != 4:
        raise ValueError(f"Invalid colour: {color!r}")
    return channels


def new_canvas(width: int, height: int, fill: Optional[ColorValue] = None) -> Image.Image:
    """Allocate an ``RGBA`` surface, painting it with ``fill``."""
    if width <= 0 or height <= 0:
        raise InvalidGeometryError(f"canvas size must be positive, got {width}x{height}")
    try:
        return Image.new("RGBA", (width, height), parse_color(fill))
    except (MemoryError, ValueError) as exc:
        raise RenderContextError(f"Unable to allocate {width}x{height} surface: {exc}") from exc


def ensure_rgba(image: Image.Image) -> Image.Image:
    return image if image.mode == "RGBA" else image.convert("RGBA")


def draw_over(canvas: Image.Image, source: Image.Image, x: int, y: int) -> None:
    """Composite ``source`` onto ``canvas`` at ``(x, y)``, clipping to the canvas.

    Pillow's ``alpha_composite`` rejects negative destinations, so the
    visible part of the source is cut out first.
    """
    visible = Rect(0, 0, canvas.width, canvas.height).intersection(
        Rect(x, y, source.width, source.height)
    )
    if visible is None:
        return
    left, top = int(visible.x), int(visible.y)
    box = (left - x, top - y, left - x + int(visible.width), top - y + int(visible.height))
    canvas.alpha_composite(ensure_rgba(source), dest=(left, top), source=box)


def draw_scaled(canvas: Image.Image, source: Image.Image, rect: Rect) -> None:
    """Draw ``source`` resampled into ``rect`` with smooth (Lanczos) filtering."""
    left, top, right, bottom = rect.to_box()
    width, height = right - left, bottom - top
    if width < 1 or height < 1:
        LOGGER.debug("Skipping draw of sub-pixel object %sx%s", rect.width, rect.height)
        return
    scaled = ensure_rgba(source)
    if scaled.size != (width, height):
        scaled = scaled.resize((width, height), Image.Resampling.LANCZOS)
    draw_over(canvas, scaled, left, top)


def flatten(image: Image.Image, matte: ColorValue = config.MATTE_COLOR) -> Image.Image:
    """Return an opaque ``RGB`` copy of ``image`` composited over ``matte``."""
    background = new_canvas(image.width, image.height, matte)
    background.alpha_composite(ensure_rgba(image))
    return background.convert("RGB")


def crop_image(
    image: Image.Image,
    crop: PixelCrop,
    background: Optional[ColorValue] = None,
) -> Image.Image:
    """Return a new image holding exactly the ``crop`` region of ``image``.

    The output is first filled with ``background`` (transparent by
    default), so parts of the crop outside the source keep the fill.

    Raises:
        InvalidGeometryError: If the crop width or height is not positive.
    """
    crop.rect.require_drawable("crop")
    left, top, right, bottom = crop.rect.to_box()
    output = new_canvas(right - left, bottom - top, background)

    overlap = Rect(0, 0, image.width, image.height).intersection(
        Rect(left, top, right - left, bottom - top)
    )
    if overlap is None:
        return output

    region = ensure_rgba(image).crop(overlap.to_box())
    dest = (int(overlap.x) - left, int(overlap.y) - top)
    if parse_color(background)[3] == 0:
        # Onto a cleared surface source pixels are copied verbatim.
        output.paste(region, dest)
    else:
        output.alpha_composite(region, dest=dest)
    return output


def resize_canvas(
    image: Image.Image,
    width: int,
    height: int,
    mode: FitMode | str = FitMode.CONTAIN,
    background: Optional[ColorValue] = config.DEFAULT_BACKGROUND,
    transform: Optional[ObjectTransform] = None,
) -> Image.Image:
    """Place ``image`` on a new ``width x height`` canvas.

    Args:
        image: Source image.
        width: Target canvas width in pixels.
        height: Target canvas height in pixels.
        mode: Fit mode deriving the object's base size.
        background: Solid fill colour, or ``"transparent"``/``None`` for none.
        transform: Object scale and optional explicit top-left offset.

    Returns:
        Image.Image: The composed ``RGBA`` canvas.
    """
    canvas = new_canvas(width, height, background)
    rect = fit_rect(image.width, image.height, width, height, mode, transform)
    draw_scaled(canvas, image, rect)
    return canvas


def _crop_operation(image: Image.Image, *, x, y, width, height, background=None) -> Image.Image:
    return crop_image(image, PixelCrop(x, y, width, height), background)


def _resize_operation(
    image: Image.Image,
    *,
    width,
    height,
    mode="contain",
    background=config.DEFAULT_BACKGROUND,
    scale=1.0,
    position=None,
) -> Image.Image:
    transform = ObjectTransform(scale=scale)
    if position is not None:
        transform = transform.with_position(*position)
    return resize_canvas(image, width, height, mode, background, transform)


_OPERATION_DISPATCH: dict[str, Any] = {
    "crop": _crop_operation,
    "resize": _resize_operation,
}


def apply_operations(image: Image.Image, operations: list[dict[str, Any]]) -> Image.Image:
    """Apply a sequence of ``operations`` to ``image``.

    Each operation dictionary must contain a ``type`` key matching one of
    :data:`_OPERATION_DISPATCH` and an optional ``params`` dictionary.
    Unknown operation types are skipped with a warning.
    """
    result = image
    for operation in operations:
        op_type = operation.get("type")
        params = operation.get("params", {})
        func = _OPERATION_DISPATCH.get(op_type)
        if not func:
            LOGGER.warning("Unknown operation type: %s", op_type)
            continue
        result = func(result, **params)
    return result


__all__ = [
    "PixelCrop",
    "parse_color",
    "new_canvas",
    "ensure_rgba",
    "draw_over",
    "draw_scaled",
    "flatten",
    "crop_image",
    "resize_canvas",
    "apply_operations",
]
