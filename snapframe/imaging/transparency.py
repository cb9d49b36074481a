"""Grid-sampled transparency detection.

Scanning every pixel of a large photo is wasteful, so the image is sampled
on a grid of between ``SAMPLE_GRID_MIN`` and ``SAMPLE_GRID_MAX`` points per
axis, derived from the image area.  The check is sufficient, not
exhaustive: a transparent region that falls entirely between grid points
is not reported.
"""

from __future__ import annotations

import logging
import math

from PIL import Image

from .. import config

LOGGER = logging.getLogger(__name__)

_ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa", "La"}


def sample_grid_size(width: int, height: int) -> int:
    """Return the number of samples per axis for a ``width x height`` image."""
    return min(
        config.SAMPLE_GRID_MAX,
        max(config.SAMPLE_GRID_MIN, math.isqrt(width * height) // 10),
    )


def sample_steps(width: int, height: int) -> tuple[int, int]:
    """Return the ``(x, y)`` pixel stride of the sampling grid."""
    grid = sample_grid_size(width, height)
    return max(1, width // grid), max(1, height // grid)


def _alpha_channel(image: Image.Image) -> Image.Image | None:
    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")
    elif image.mode not in _ALPHA_MODES:
        return None
    return image.getchannel("A")


def has_transparency(image: Image.Image) -> bool:
    """Return ``True`` if any sampled pixel of ``image`` is not fully opaque.

    Images without an alpha band are opaque by definition and are not
    sampled at all.
    """
    width, height = image.size
    if width == 0 or height == 0:
        return False

    alpha = _alpha_channel(image)
    if alpha is None:
        return False

    step_x, step_y = sample_steps(width, height)
    pixels = alpha.load()
    for y in range(0, height, step_y):
        for x in range(0, width, step_x):
            if pixels[x, y] < config.OPAQUE_ALPHA:
                LOGGER.debug("Transparent pixel sampled at (%d, %d)", x, y)
                return True
    return False


__all__ = ["has_transparency", "sample_grid_size", "sample_steps"]
