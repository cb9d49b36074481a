"""Local image editing and collage export engine."""

__version__ = "1.0.0"
