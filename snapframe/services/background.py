"""Background-removal collaborator.

The removal itself is opaque to the core: any callable taking an image and
returning a same-subject image with alpha will do.  The default delegates
to ``rembg`` (install the ``background`` extra).  Exactly one attempt is
made; failures surface as :class:`BackgroundRemovalError`.
"""

from __future__ import annotations

import io
import logging
from typing import Callable, Optional

from PIL import Image

from ..errors import BackgroundRemovalError
from ..imaging.image_operations import ensure_rgba

LOGGER = logging.getLogger(__name__)

BackgroundRemover = Callable[[Image.Image], Image.Image]


def rembg_remover(image: Image.Image) -> Image.Image:
    """Remove the background of ``image`` with ``rembg``."""
    try:
        from rembg import remove
    except ImportError as exc:
        raise BackgroundRemovalError(
            "rembg is not installed. Install it with: pip install snapframe[background]"
        ) from exc

    buffer = io.BytesIO()
    ensure_rgba(image).save(buffer, format="PNG")
    output = remove(buffer.getvalue())
    return Image.open(io.BytesIO(output))


def remove_background(
    image: Image.Image,
    remover: Optional[BackgroundRemover] = None,
) -> Image.Image:
    """
    Run ``remover`` once on ``image`` and return its result as ``RGBA``.

    The result may differ in size from the input.

    Raises:
        BackgroundRemovalError: If the remover fails or returns no image
    """
    remover = remover or rembg_remover
    try:
        result = remover(image)
    except BackgroundRemovalError:
        raise
    except Exception as exc:
        LOGGER.error("Background removal failed: %s", exc)
        raise BackgroundRemovalError(f"Background removal failed: {exc}") from exc

    if not isinstance(result, Image.Image):
        raise BackgroundRemovalError("Background removal returned no image")
    if result.size != image.size:
        LOGGER.info(
            "Background removal changed size from %sx%s to %sx%s",
            *image.size,
            *result.size,
        )
    result = ensure_rgba(result)
    result.load()
    return result
