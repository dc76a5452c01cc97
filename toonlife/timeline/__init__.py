"""Interpolación visual y línea de tiempo de audio."""

from .audio import (
    MIN_CLIP_DURATION,
    AudibleClip,
    ClipDragController,
    audible_clips_at,
    move_clip,
    playback_rate,
    seconds_from_pixels,
    trim_clip_end,
    trim_clip_start,
)
from .interpolation import bracketing_keyframes, keyframe_times, lerp, resolve_frame

__all__ = [
    "MIN_CLIP_DURATION",
    "AudibleClip",
    "ClipDragController",
    "audible_clips_at",
    "bracketing_keyframes",
    "keyframe_times",
    "lerp",
    "move_clip",
    "playback_rate",
    "resolve_frame",
    "seconds_from_pixels",
    "trim_clip_end",
    "trim_clip_start",
]
