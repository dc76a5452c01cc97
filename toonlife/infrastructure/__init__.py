"""Carga de assets, composición de frames y codificación."""

from .assets import AssetLoader, AssetResolver, scene_asset_refs
from .compositor import FrameCompositor
from .encoder import Encoder, FFmpegEncoder

__all__ = [
    "AssetLoader",
    "AssetResolver",
    "Encoder",
    "FFmpegEncoder",
    "FrameCompositor",
    "scene_asset_refs",
]
