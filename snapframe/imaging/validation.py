"""Input validation helpers for image files and target sizes."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union
from urllib.parse import urlparse

from .. import config
from ..errors import InvalidGeometryError

IMAGE_EXTENSIONS = frozenset(f".{fmt}" for fmt in config.SUPPORTED_IMAGE_FORMATS)
EXPORT_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})


def _has_url_scheme(path_str: str) -> bool:
    """Return True if *path_str* looks like a URL with a scheme.

    Single-letter schemes such as ``"C"`` are treated as drive letters on
    Windows and therefore ignored.
    """
    parsed = urlparse(path_str)
    return bool(parsed.scheme and len(parsed.scheme) > 1)


def validate_image_path(
    path: Union[str, Path], allowed_exts: Iterable[str] = IMAGE_EXTENSIONS
) -> Path:
    """Validate a user-supplied image *path*.

    The path must point to an existing local file with an allowed
    extension.  Returns the resolved ``Path``.
    """
    path_str = str(path)
    if _has_url_scheme(path_str):
        raise ValueError("URLs are not allowed")

    p = Path(path_str).expanduser()
    try:
        p = p.resolve(strict=True)
    except FileNotFoundError as exc:
        raise ValueError(f"File does not exist: {path_str}") from exc

    if not p.is_file():
        raise ValueError(f"Not a file: {path_str}")

    if p.suffix.lower() not in {ext.lower() for ext in allowed_exts}:
        raise ValueError(f"Unsupported file extension: {p.suffix}")

    return p


def validate_output_path(
    path: Union[str, Path], allowed_exts: Iterable[str] = EXPORT_EXTENSIONS
) -> Path:
    """Validate an export *path*: existing directory, allowed extension, no URL."""
    path_str = str(path)
    if _has_url_scheme(path_str):
        raise ValueError("URLs are not allowed")

    p = Path(path_str).expanduser().resolve()

    if not p.parent.exists():
        raise ValueError(f"Directory does not exist: {p.parent}")

    if p.suffix.lower() not in {ext.lower() for ext in allowed_exts}:
        raise ValueError(f"Unsupported file extension: {p.suffix}")

    return p


def validate_dimensions(
    width: int, height: int, *, limit: int = config.MAX_IMAGE_DIMENSION
) -> tuple[int, int]:
    """Ensure a raster size is positive and within ``limit`` on both edges."""
    if width <= 0 or height <= 0:
        raise InvalidGeometryError(f"Dimensions must be positive, got {width}x{height}")
    if width > limit or height > limit:
        raise InvalidGeometryError(
            f"Dimensions {width}x{height} exceed the {limit}px limit"
        )
    return width, height
