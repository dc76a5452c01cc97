"""
ToonLife
Motor de línea de tiempo, composición y exportación de escenas animadas.
"""

from .config import EngineConfig, load_config
from .domain import AudioClip, Keyframe, Scene, SceneHistory, TrackId, VisualFrame
from .errors import AssetUnavailable, DeviceUnavailable, EncoderFailure, InvalidClipEdit, ToonLifeError
from .timeline import audible_clips_at, resolve_frame

__version__ = "0.1.0"

__all__ = [
    "AssetUnavailable",
    "AudioClip",
    "DeviceUnavailable",
    "EncoderFailure",
    "EngineConfig",
    "InvalidClipEdit",
    "Keyframe",
    "Scene",
    "SceneHistory",
    "ToonLifeError",
    "TrackId",
    "VisualFrame",
    "audible_clips_at",
    "load_config",
    "resolve_frame",
]
