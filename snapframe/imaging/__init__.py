"""Raster compositing and export engine."""

from . import (
    collage_layouts,
    collage_renderer,
    encoder,
    geometry,
    image_operations,
    image_processor,
    transparency,
)

__all__ = [
    "collage_layouts",
    "collage_renderer",
    "encoder",
    "geometry",
    "image_operations",
    "image_processor",
    "transparency",
]
