"""Exportación de escenas a video."""

from .renderer import ExportRenderer, frame_timestamps

__all__ = ["ExportRenderer", "frame_timestamps"]
