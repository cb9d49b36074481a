"""Fit-mode geometry for placing a source image inside a target rectangle.

All functions here are pure: they take sizes and return rectangles in the
target's local coordinate space.  Values stay fractional until a raster is
written, at which point :meth:`Rect.to_box` rounds them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .. import config
from ..errors import InvalidGeometryError


class FitMode(str, Enum):
    """How a source is scaled into a target rectangle."""

    CONTAIN = "contain"
    COVER = "cover"
    STRETCH = "stretch"

    @classmethod
    def parse(cls, value: "FitMode | str") -> "FitMode":
        """Return the member for ``value`` or raise :class:`InvalidGeometryError`."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidGeometryError(f"Unknown fit mode: {value!r}") from None


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Rect:
    """Rectangle in pixel or percentage space."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    def is_drawable(self) -> bool:
        return self.width > 0 and self.height > 0

    def require_drawable(self, what: str = "rect") -> "Rect":
        """Return ``self`` or raise when the rect has no area."""
        if not self.is_drawable():
            raise InvalidGeometryError(
                f"{what} must have positive width and height, got "
                f"{self.width}x{self.height}"
            )
        return self

    def to_box(self) -> tuple[int, int, int, int]:
        """Round to an integer ``(left, top, right, bottom)`` box."""
        left = round(self.x)
        top = round(self.y)
        return left, top, left + round(self.width), top + round(self.height)

    def intersection(self, other: "Rect") -> Optional["Rect"]:
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return Rect(left, top, right - left, bottom - top)


@dataclass(frozen=True, slots=True)
class ObjectTransform:
    """User-controlled zoom and optional explicit top-left offset.

    With ``position`` left as ``None`` the drawn object is centred in the
    target; otherwise ``position`` is its absolute top-left corner.
    """

    scale: float = 1.0
    position: Optional[Point] = None

    def __post_init__(self) -> None:
        if self.scale < 0:
            raise InvalidGeometryError(f"scale must be >= 0, got {self.scale}")

    def with_scale(self, scale: float) -> "ObjectTransform":
        return replace(self, scale=scale)

    def with_position(self, x: float, y: float) -> "ObjectTransform":
        return replace(self, position=Point(x, y))

    def centered(self) -> "ObjectTransform":
        return replace(self, position=None)


def aspect_ratio(width: float, height: float) -> float:
    """Return ``width / height``; a non-positive edge is a fatal input error."""
    if width <= 0 or height <= 0:
        raise InvalidGeometryError(f"aspect ratio undefined for {width}x{height}")
    return width / height


def base_size(
    source_aspect: float,
    target_width: float,
    target_height: float,
    mode: FitMode,
) -> tuple[float, float]:
    """Return the unscaled draw size of a source inside the target for ``mode``."""
    if mode is FitMode.STRETCH:
        return target_width, target_height

    target_aspect = target_width / target_height
    wider = source_aspect > target_aspect
    if mode is FitMode.CONTAIN:
        if wider:
            return target_width, target_width / source_aspect
        return target_height * source_aspect, target_height
    if mode is FitMode.COVER:
        if wider:
            return target_height * source_aspect, target_height
        return target_width, target_width / source_aspect
    raise InvalidGeometryError(f"Unsupported fit mode: {mode!r}")


def fit_rect(
    source_width: float,
    source_height: float,
    target_width: float,
    target_height: float,
    mode: FitMode | str = FitMode.CONTAIN,
    transform: Optional[ObjectTransform] = None,
) -> Rect:
    """Compute where a source is drawn inside a ``target_width x target_height`` area.

    Args:
        source_width: Width of the source image in pixels. Must be positive.
        source_height: Height of the source image in pixels. Must be positive.
        target_width: Width of the target area.
        target_height: Height of the target area.
        mode: Fit mode used to derive the base size.
        transform: Scale and optional explicit offset. Defaults to a
            centred object at scale 1.

    Returns:
        Rect: Drawable rectangle in target-local coordinates. It may extend
        past the target for ``cover`` or scales above 1.

    Raises:
        InvalidGeometryError: If the source or target size is not positive.
    """
    Rect(0, 0, target_width, target_height).require_drawable("target")
    source_aspect = aspect_ratio(source_width, source_height)
    transform = transform or ObjectTransform()

    width, height = base_size(source_aspect, target_width, target_height, FitMode.parse(mode))
    width *= transform.scale
    height *= transform.scale

    if transform.position is not None:
        return Rect(transform.position.x, transform.position.y, width, height)
    return Rect((target_width - width) / 2, (target_height - height) / 2, width, height)


def clamp_scale(
    scale: float,
    minimum: float = config.SCALE_MIN,
    maximum: float = config.SCALE_MAX,
) -> float:
    """Clamp ``scale`` into the UI's zoom range."""
    return max(minimum, min(maximum, scale))


def match_aspect(
    aspect: float,
    *,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> tuple[int, int]:
    """Return ``(width, height)`` completing one given edge at ``aspect``.

    Used when a target size is edited with "maintain aspect ratio" enabled.
    """
    if aspect <= 0:
        raise InvalidGeometryError(f"aspect must be positive, got {aspect}")
    if (width is None) == (height is None):
        raise ValueError("exactly one of width or height is required")
    if width is not None:
        return width, round(width / aspect)
    return round(height * aspect), height


__all__ = [
    "FitMode",
    "Point",
    "Rect",
    "ObjectTransform",
    "aspect_ratio",
    "base_size",
    "fit_rect",
    "clamp_scale",
    "match_aspect",
]
