"""Preset persistence and memory monitoring."""

from .performance import MemoryMonitor, get_monitor
from .presets import BUILTIN_PRESETS, PresetStore, SizePreset, find_preset

__all__ = [
    "BUILTIN_PRESETS",
    "MemoryMonitor",
    "PresetStore",
    "SizePreset",
    "find_preset",
    "get_monitor",
]
