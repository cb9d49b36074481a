from pathlib import Path
from typing import Dict, List, Optional, Union
from dataclasses import dataclass
import io
import logging
from PIL import Image, ImageOps, UnidentifiedImageError
from concurrent.futures import ThreadPoolExecutor

from .. import config
from ..cache import DecodedImageCache, content_key, get_cache
from ..errors import ImageDecodeError, InvalidGeometryError
from ..managers.performance import get_monitor
from .transparency import has_transparency
from .validation import IMAGE_EXTENSIONS, validate_dimensions, validate_image_path

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ImageInfo:
    """
    Describes a decoded image.

    Attributes:
        format (Optional[str]): Source format (e.g., JPEG, PNG)
        source_mode (str): Colour mode before normalisation to RGBA
        size (tuple[int, int]): Image dimensions after EXIF orientation
        has_transparency (bool): Result of the grid transparency sampler
    """
    format: Optional[str]
    source_mode: str
    size: tuple[int, int]
    has_transparency: bool


class ImageLoader:
    """Decodes image bytes and files into RGBA rasters, with caching."""

    VALID_EXTENSIONS = IMAGE_EXTENSIONS

    def __init__(self, cache: Optional[DecodedImageCache] = None):
        self._cache = cache

    @property
    def cache(self) -> DecodedImageCache:
        return self._cache or get_cache()

    def decode(self, data: bytes) -> Image.Image:
        """
        Decode ``data`` into an ``RGBA`` image with EXIF orientation applied.

        Args:
            data: Encoded image bytes in any format Pillow can read

        Returns:
            Image.Image: Decoded image. Treat it as read-only; it may be shared
            through the cache.

        Raises:
            ImageDecodeError: If the bytes are not a readable image or exceed
                the dimension limit
        """
        key = content_key(data)
        cached = self.cache.get(key)
        if cached is not None:
            return cached.image

        image, info = self._decode_uncached(data)
        self.cache.put(key, image, {"info": info})
        return image

    def info(self, data: bytes) -> ImageInfo:
        """Return :class:`ImageInfo` for ``data``, decoding it if needed."""
        key = content_key(data)
        cached = self.cache.get(key)
        if cached is None:
            self.decode(data)
            cached = self.cache.get(key)
        if cached is None:
            return self._decode_uncached(data)[1]
        return cached.metadata["info"]

    def _decode_uncached(self, data: bytes) -> tuple[Image.Image, ImageInfo]:
        try:
            with Image.open(io.BytesIO(data)) as img:
                source_format = img.format
                source_mode = img.mode
                validate_dimensions(*img.size)
                oriented = ImageOps.exif_transpose(img)
                rgba = oriented.convert("RGBA")
                rgba.load()
        except InvalidGeometryError as exc:
            raise ImageDecodeError(str(exc)) from exc
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
            LOGGER.warning("Failed to decode image: %s", exc)
            raise ImageDecodeError(f"Unable to decode image: {exc}") from exc

        info = ImageInfo(
            format=source_format,
            source_mode=source_mode,
            size=rgba.size,
            has_transparency=has_transparency(rgba),
        )
        LOGGER.debug("Decoded %s image %sx%s", source_format, *rgba.size)
        return rgba, info

    def load(self, image_path: Union[str, Path]) -> Image.Image:
        """
        Validate and decode an image file.

        Raises:
            ValueError: If the path is invalid
            ImageDecodeError: If the file cannot be decoded
        """
        safe_path = validate_image_path(image_path, self.VALID_EXTENSIONS)
        return self.decode(safe_path.read_bytes())

    def load_batch(
        self,
        image_paths: List[Union[str, Path]],
        *,
        max_workers: int = config.LOAD_WORKERS,
    ) -> Dict[str, Optional[Image.Image]]:
        """
        Decode several files in parallel.

        Returns:
            Dict[str, Optional[Image.Image]]: Decoded image per input path, or
            ``None`` where validation or decoding failed
        """
        results: Dict[str, Optional[Image.Image]] = {}
        if not image_paths:
            return results

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [(path, pool.submit(self.load, path)) for path in image_paths]
            for path, future in futures:
                try:
                    results[str(path)] = future.result()
                except (ValueError, ImageDecodeError) as e:
                    LOGGER.error(f"Failed to load {path}: {e}")
                    results[str(path)] = None

        get_monitor().check_memory()

        return results
