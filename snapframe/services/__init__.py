"""External collaborators used by the editor."""

from .background import BackgroundRemover, rembg_remover, remove_background

__all__ = ["BackgroundRemover", "rembg_remover", "remove_background"]
