"""Modelo de datos y operaciones de edición de escenas."""

from .models import (
    AnimationPreset,
    AudioClip,
    Background,
    CharacterItem,
    CharacterTemplate,
    DrawableItem,
    Keyframe,
    PhotoItem,
    Pose,
    Scene,
    SoundEffect,
    TextItem,
    TrackId,
    UploadedAsset,
    VisualFrame,
)
from .history import SceneHistory

__all__ = [
    "AnimationPreset",
    "AudioClip",
    "Background",
    "CharacterItem",
    "CharacterTemplate",
    "DrawableItem",
    "Keyframe",
    "PhotoItem",
    "Pose",
    "Scene",
    "SceneHistory",
    "SoundEffect",
    "TextItem",
    "TrackId",
    "UploadedAsset",
    "VisualFrame",
]
