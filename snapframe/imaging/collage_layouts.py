from dataclasses import dataclass, field, replace
from typing import List, Dict, Tuple
import logging
from pathlib import Path
import json
from functools import lru_cache

from .. import config
from ..errors import InvalidGeometryError
from .geometry import Rect


@dataclass(frozen=True, slots=True)
class LayoutCell:
    """One rectangular region of a layout, in percent of the canvas."""

    id: str
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict:
        return {"id": self.id, "x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict) -> 'LayoutCell':
        return cls(
            id=str(data["id"]),
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass(slots=True)
class CollageLayout:
    """Represents a collage layout: percentage cells on a pixel canvas."""

    name: str
    cells: Tuple[LayoutCell, ...]
    gap: float = 0
    canvas_width: int = config.DEFAULT_CANVAS_WIDTH
    canvas_height: int = config.DEFAULT_CANVAS_HEIGHT
    description: str = ""
    tags: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.cells = tuple(self.cells)
        self._validate_cells()

    def _validate_cells(self) -> None:
        """
        Validate the cell structure.

        Raises:
            InvalidGeometryError: If the layout is malformed
        """
        if not self.cells:
            raise InvalidGeometryError("Layout must contain at least one cell")

        ids = [cell.id for cell in self.cells]
        if len(set(ids)) != len(ids):
            raise InvalidGeometryError(f"Layout '{self.name}' has duplicate cell ids")

        for cell in self.cells:
            values = (cell.x, cell.y, cell.width, cell.height)
            if not all(0 <= value <= 100 for value in values):
                raise InvalidGeometryError(f"Cell '{cell.id}' must use percentages within 0-100")
            if cell.width <= 0 or cell.height <= 0:
                raise InvalidGeometryError(f"Cell '{cell.id}' must have a positive size")

        if self.gap < 0:
            raise InvalidGeometryError("Gap must be non-negative")
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise InvalidGeometryError("Canvas size must be positive")

    @property
    def cell_ids(self) -> List[str]:
        return [cell.id for cell in self.cells]

    def get_cell(self, cell_id: str) -> LayoutCell:
        for cell in self.cells:
            if cell.id == cell_id:
                return cell
        raise KeyError(f"Layout '{self.name}' has no cell '{cell_id}'")

    def with_canvas(self, canvas_width: int, canvas_height: int) -> 'CollageLayout':
        """Return a copy of this layout applied to a different canvas size."""
        return replace(self, canvas_width=canvas_width, canvas_height=canvas_height, tags=list(self.tags))

    def cell_bounds(self, cell: LayoutCell) -> Rect:
        """
        Resolve a cell to absolute pixels, inset by the gap on every edge.

        A gap large enough to leave no area is a configuration error.

        Raises:
            InvalidGeometryError: If the resolved cell has no area
        """
        rect = Rect(
            cell.x / 100 * self.canvas_width + self.gap,
            cell.y / 100 * self.canvas_height + self.gap,
            cell.width / 100 * self.canvas_width - 2 * self.gap,
            cell.height / 100 * self.canvas_height - 2 * self.gap,
        )
        return rect.require_drawable(f"cell '{cell.id}'")

    def get_cell_dimensions(self) -> Dict[str, Rect]:
        """Return the absolute bounds of every cell, in layout order."""
        return {cell.id: self.cell_bounds(cell) for cell in self.cells}

    def to_dict(self) -> Dict:
        """Convert the layout to a dictionary representation."""
        return {
            "name": self.name,
            "cells": [cell.to_dict() for cell in self.cells],
            "gap": self.gap,
            "canvas_width": self.canvas_width,
            "canvas_height": self.canvas_height,
            "description": self.description,
            "tags": self.tags
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'CollageLayout':
        """Create a layout from a dictionary representation."""
        required_keys = {"name", "cells"}
        if not all(key in data for key in required_keys):
            raise ValueError(f"Missing required keys: {required_keys - data.keys()}")

        return cls(
            name=data["name"],
            cells=tuple(LayoutCell.from_dict(cell) for cell in data["cells"]),
            gap=data.get("gap", 0),
            canvas_width=data.get("canvas_width", config.DEFAULT_CANVAS_WIDTH),
            canvas_height=data.get("canvas_height", config.DEFAULT_CANVAS_HEIGHT),
            description=data.get("description", ""),
            tags=data.get("tags", [])
        )


def _cells(*boxes: Tuple[float, float, float, float]) -> Tuple[LayoutCell, ...]:
    return tuple(LayoutCell(f"cell-{i}", *box) for i, box in enumerate(boxes, start=1))


class CollageLayouts:
    """Manages collage layout templates."""

    # Default layouts
    LAYOUTS: Dict[str, CollageLayout] = {
        "single": CollageLayout(
            "single",
            _cells((0, 0, 100, 100)),
            gap=0,
            description="Single full-canvas image",
            tags=["basic"],
        ),
        "split-horizontal": CollageLayout(
            "split-horizontal",
            _cells((0, 0, 50, 100), (50, 0, 50, 100)),
            gap=10,
            description="Left and right halves",
            tags=["basic", "split"],
        ),
        "split-vertical": CollageLayout(
            "split-vertical",
            _cells((0, 0, 100, 50), (0, 50, 100, 50)),
            gap=10,
            description="Top and bottom halves",
            tags=["basic", "split"],
        ),
        "three-left-right": CollageLayout(
            "three-left-right",
            _cells((0, 0, 50, 100), (50, 0, 50, 50), (50, 50, 50, 50)),
            gap=10,
            description="One tall cell on the left, two stacked on the right",
            tags=["mixed"],
        ),
        "four-grid": CollageLayout(
            "four-grid",
            _cells((0, 0, 50, 50), (50, 0, 50, 50), (0, 50, 50, 50), (50, 50, 50, 50)),
            gap=10,
            description="Basic 2x2 grid layout",
            tags=["basic", "grid"],
        ),
    }

    @classmethod
    def get_layout(cls, name: str) -> CollageLayout:
        """Get a layout by name."""
        try:
            return cls.LAYOUTS[name]
        except KeyError:
            logging.error(f"Layout '{name}' not found")
            raise ValueError(f"Layout '{name}' not found")

    @classmethod
    @lru_cache(maxsize=None)
    def get_layout_names(cls) -> Tuple[str, ...]:
        """Get the available layout names, in registration order."""
        return tuple(cls.LAYOUTS)

    @classmethod
    @lru_cache(maxsize=None)
    def get_layouts_by_tag(cls, tag: str) -> Tuple[CollageLayout, ...]:
        """Get layouts filtered by tag."""
        return tuple(
            layout for layout in cls.LAYOUTS.values()
            if tag in layout.tags
        )

    @classmethod
    def _invalidate_caches(cls) -> None:
        """Clear cached layout lookups."""
        cls.get_layout_names.cache_clear()
        cls.get_layouts_by_tag.cache_clear()

    @classmethod
    def add_custom_layout(cls, layout: CollageLayout) -> None:
        """Add a custom layout."""
        if layout.name in cls.LAYOUTS:
            raise ValueError(f"Layout '{layout.name}' already exists")

        cls.LAYOUTS[layout.name] = layout
        logging.info(f"Added new layout: {layout.name}")
        cls._invalidate_caches()

    @classmethod
    def remove_layout(cls, name: str) -> None:
        """Remove a layout by name."""
        try:
            del cls.LAYOUTS[name]
            logging.info(f"Removed layout: {name}")
        except KeyError:
            raise ValueError(f"Layout '{name}' not found")
        else:
            cls._invalidate_caches()

    @classmethod
    def save_layouts(cls, file_path: str) -> None:
        """Save all layouts to a JSON file."""
        try:
            path = Path(file_path)
            path.parent.mkdir(parents=True, exist_ok=True)

            layouts_data = {
                name: layout.to_dict()
                for name, layout in cls.LAYOUTS.items()
            }

            with path.open('w', encoding='utf-8') as f:
                json.dump(layouts_data, f, indent=2)

            logging.info(f"Saved layouts to {file_path}")
        except Exception as e:
            logging.error(f"Failed to save layouts: {e}")
            raise

    @classmethod
    def load_layouts(cls, file_path: str) -> None:
        """Load layouts from a JSON file, replacing same-named entries."""
        try:
            path = Path(file_path)
            if not path.exists():
                raise FileNotFoundError(f"Layout file not found: {file_path}")

            with path.open('r', encoding='utf-8') as f:
                layouts_data = json.load(f)

            for name, layout_data in layouts_data.items():
                cls.LAYOUTS[name] = CollageLayout.from_dict(layout_data)

            logging.info(f"Loaded layouts from {file_path}")
            cls._invalidate_caches()
        except Exception as e:
            logging.error(f"Failed to load layouts: {e}")
            raise
