# managers/presets.py
"""Canvas size presets.

Built-in presets cover common social-media formats.  User presets are a
flat list persisted as JSON under a single namespaced key; the whole list
is rewritten on every change.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from .. import config

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SizePreset:
    name: str
    width: int
    height: int
    label: str = "Custom"

    @classmethod
    def from_payload(cls, payload: Dict) -> "SizePreset":
        return cls(
            name=str(payload["name"]),
            width=int(payload["width"]),
            height=int(payload["height"]),
            label=str(payload.get("label", "Custom")),
        )


BUILTIN_PRESETS: Dict[str, List[SizePreset]] = {
    "Universal": [
        SizePreset("Square", 1080, 1080, "1:1"),
        SizePreset("Portrait", 1080, 1350, "4:5"),
        SizePreset("Full vertical (Stories/Threads)", 1080, 1920, "9:16"),
    ],
    "Facebook": [
        SizePreset("Feed post - landscape", 1200, 630, "1.91:1"),
        SizePreset("Feed post - square", 1080, 1080, "1:1"),
        SizePreset("Feed post - portrait", 1080, 1350, "4:5"),
        SizePreset("Three-image main (top landscape)", 1200, 600, "2:1"),
        SizePreset("Three-image main (left portrait)", 600, 1200, "1:2"),
        SizePreset("Three-image secondary (square)", 600, 600, "1:1"),
        SizePreset("Story", 1080, 1920, "9:16"),
    ],
    "Instagram": [
        SizePreset("Post - square", 1080, 1080, "1:1"),
        SizePreset("Post - portrait", 1080, 1350, "4:5"),
        SizePreset("Post - landscape", 1080, 566, "1.91:1"),
        SizePreset("Story / Reels", 1080, 1920, "9:16"),
    ],
    "Threads": [
        SizePreset("Post / carousel", 1080, 1920, "9:16"),
        SizePreset("Link preview", 1200, 600, "2:1"),
    ],
}


class PresetStore:
    """Loads and saves user-defined presets."""

    def __init__(
        self,
        path: Union[str, Path] = config.PRESETS_PATH,
        key: str = config.PRESETS_KEY,
    ) -> None:
        self.path = Path(path)
        self.key = key

    def load(self) -> List[SizePreset]:
        """Return saved presets; a missing or unreadable store yields ``[]``."""
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
            return [SizePreset.from_payload(item) for item in payload.get(self.key, [])]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            LOGGER.error("Failed to load presets", extra={"path": str(self.path), "error": str(exc)})
            return []

    def save(self, presets: List[SizePreset]) -> None:
        """Rewrite the store with ``presets``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {self.key: [asdict(preset) for preset in presets]}
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
        LOGGER.info("Saved %d presets to %s", len(presets), self.path)

    def add(self, width: int, height: int, name: Optional[str] = None) -> List[SizePreset]:
        """Append a preset; unnamed presets become ``Custom N``."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Preset size must be positive, got {width}x{height}")
        presets = self.load()
        label = (name or "").strip() or f"Custom {len(presets) + 1}"
        presets.append(SizePreset(label, width, height))
        self.save(presets)
        return presets

    def delete(self, index: int) -> List[SizePreset]:
        presets = self.load()
        if not 0 <= index < len(presets):
            raise IndexError(f"No preset at index {index}")
        del presets[index]
        self.save(presets)
        return presets


def find_preset(name: str, store: Optional[PresetStore] = None) -> SizePreset:
    """Look up a preset by name among built-ins, then user presets."""
    for presets in BUILTIN_PRESETS.values():
        for preset in presets:
            if preset.name == name:
                return preset
    if store is not None:
        for preset in store.load():
            if preset.name == name:
                return preset
    raise KeyError(f"Preset '{name}' not found")
