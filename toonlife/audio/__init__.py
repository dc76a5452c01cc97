"""Mezcla de audio, creación de clips y grabación de voz."""

from .clips import background_music_clip, clip_from_sound_effect, clip_from_source, probe_duration
from .mixer import AudioMixer
from .recorder import Recording, RecordingDevice, VoiceRecorder

__all__ = [
    "AudioMixer",
    "Recording",
    "RecordingDevice",
    "VoiceRecorder",
    "background_music_clip",
    "clip_from_sound_effect",
    "clip_from_source",
    "probe_duration",
]
