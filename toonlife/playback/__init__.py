"""Reloj de reproducción y sincronización de audio en vivo."""

from .clock import PlaybackClock
from .session import PreviewFrame, PreviewSession
from .sync import AudioOutput, LiveSync

__all__ = ["AudioOutput", "LiveSync", "PlaybackClock", "PreviewFrame", "PreviewSession"]
