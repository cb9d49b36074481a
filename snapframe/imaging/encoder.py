"""Export encoding with an optional byte budget.

Lossy exports with a budget run a fixed-length binary search over quality:
six halvings pin quality down to about 1/64 of the range, which also bounds
the cost of an export.  A budget that cannot be met is not an error; the
closest effort is returned and flagged on :class:`EncodeResult`.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from PIL import Image

from .. import config
from ..errors import InvalidGeometryError
from .image_operations import ensure_rgba, flatten

LOGGER = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"

    @classmethod
    def parse(cls, value: "ExportFormat | str") -> "ExportFormat":
        if isinstance(value, cls):
            return value
        normalized = str(value).lower().removeprefix("image/").lstrip(".")
        if normalized == "jpg":
            normalized = "jpeg"
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidGeometryError(f"Unsupported export format: {value!r}") from None

    @property
    def is_lossy(self) -> bool:
        return self is ExportFormat.JPEG

    @property
    def extension(self) -> str:
        return ".jpg" if self is ExportFormat.JPEG else ".png"

    @property
    def pil_format(self) -> str:
        return self.value.upper()


@dataclass(frozen=True, slots=True)
class ExportSettings:
    """Target format, quality in ``[0, 1]`` and optional budget in KB."""

    format: ExportFormat = ExportFormat.JPEG
    quality: float = config.EDITOR_QUALITY_DEFAULT
    max_size_kb: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "format", ExportFormat.parse(self.format))
        if not 0 <= self.quality <= 1:
            raise InvalidGeometryError(f"quality must be within [0, 1], got {self.quality}")
        if self.max_size_kb is not None:
            if isinstance(self.max_size_kb, bool) or not isinstance(self.max_size_kb, int):
                raise InvalidGeometryError("max_size_kb must be an integer")
            if self.max_size_kb <= 0:
                raise InvalidGeometryError(f"max_size_kb must be positive, got {self.max_size_kb}")

    @property
    def max_bytes(self) -> Optional[int]:
        return None if self.max_size_kb is None else self.max_size_kb * 1024


@dataclass(frozen=True, slots=True)
class EncodeResult:
    """An encoded export plus how it relates to the requested budget."""

    data: bytes
    format: ExportFormat
    quality: Optional[float] = None
    max_bytes: Optional[int] = None
    iterations: int = 0

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def within_budget(self) -> bool:
        return self.max_bytes is None or self.size <= self.max_bytes

    @property
    def budget_exceeded(self) -> bool:
        """Soft warning: a budget was requested and the blob is larger."""
        return not self.within_budget

    @property
    def extension(self) -> str:
        return self.format.extension

    def filename(self, stem: str) -> str:
        return f"{stem}{self.extension}"


def _pil_quality(quality: float) -> int:
    return max(1, min(100, round(quality * 100)))


def encode_image(
    image: Image.Image,
    export_format: ExportFormat | str,
    quality: float = config.EDITOR_QUALITY_DEFAULT,
) -> bytes:
    """Encode ``image`` once. ``quality`` is ignored for lossless formats."""
    export_format = ExportFormat.parse(export_format)
    params: Dict[str, Any] = {"format": export_format.pil_format}
    if export_format is ExportFormat.JPEG:
        source = image if image.mode == "RGB" else flatten(image)
        params["quality"] = _pil_quality(quality)
    else:
        source = ensure_rgba(image)
        params["compress_level"] = config.PNG_COMPRESS_LEVEL

    buffer = io.BytesIO()
    source.save(buffer, **params)
    return buffer.getvalue()


def compress_to_size(
    image: Image.Image,
    export_format: ExportFormat | str,
    max_bytes: int,
    *,
    iterations: int = config.BUDGET_SEARCH_ITERATIONS,
    floor: float = config.QUALITY_FLOOR,
) -> EncodeResult:
    """
    Encode ``image`` as close to ``max_bytes`` as quality allows.

    Lossless formats are encoded once; there is no quality to trade.  Lossy
    formats binary-search quality in ``[0, 1]`` for ``iterations`` rounds,
    keeping the best encoding within budget.  Qualities below ``floor`` are
    encoded at ``floor``.  If nothing fits, the ``floor`` encoding is
    returned anyway.
    """
    export_format = ExportFormat.parse(export_format)
    if max_bytes <= 0:
        raise InvalidGeometryError(f"max_bytes must be positive, got {max_bytes}")

    if not export_format.is_lossy:
        data = encode_image(image, export_format)
        result = EncodeResult(data, export_format, None, max_bytes)
        if result.budget_exceeded:
            LOGGER.warning(
                "Lossless export cannot be reduced to budget: %d > %d bytes",
                result.size,
                max_bytes,
            )
        return result

    flat = flatten(image)
    low, high = 0.0, 1.0
    best: Optional[tuple[bytes, float]] = None
    for step in range(iterations):
        quality = (low + high) / 2
        data = encode_image(flat, export_format, max(quality, floor))
        LOGGER.debug("Budget search %d: quality=%.4f size=%d", step + 1, quality, len(data))
        if len(data) <= max_bytes:
            best = (data, max(quality, floor))
            low = quality
        else:
            high = quality

    if best is not None:
        return EncodeResult(best[0], export_format, best[1], max_bytes, iterations)

    data = encode_image(flat, export_format, floor)
    result = EncodeResult(data, export_format, floor, max_bytes, iterations)
    LOGGER.warning(
        "Export exceeds budget even at quality %.2f: %d > %d bytes",
        floor,
        result.size,
        max_bytes,
    )
    return result


def encode_export(image: Image.Image, settings: ExportSettings) -> EncodeResult:
    """Encode ``image`` according to ``settings``."""
    if settings.max_bytes is not None:
        return compress_to_size(image, settings.format, settings.max_bytes)

    quality = settings.quality if settings.format.is_lossy else None
    data = encode_image(image, settings.format, settings.quality)
    return EncodeResult(data, settings.format, quality)


__all__ = [
    "ExportFormat",
    "ExportSettings",
    "EncodeResult",
    "encode_image",
    "compress_to_size",
    "encode_export",
]
