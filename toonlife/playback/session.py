"""
Sesión de vista previa: reloj + audio en vivo + frame resuelto por tick.
"""
import asyncio
import logging
import time
from typing import Callable, NamedTuple, Optional

from ..config import EngineConfig
from ..domain.models import Scene, VisualFrame
from ..timeline.audio import AudibleClip, audible_clips_at
from ..timeline.interpolation import resolve_frame
from .clock import PlaybackClock
from .sync import AudioOutput, LiveSync

logger = logging.getLogger(__name__)


class PreviewFrame(NamedTuple):
    time: float
    frame: VisualFrame
    audible: list[AudibleClip]


class PreviewSession:
    """
    Vista previa interactiva de una escena.

    La escena se reemplaza entera en cada edición; la sesión nunca la modifica.
    """

    def __init__(
        self,
        scene: Scene,
        output: AudioOutput,
        config: Optional[EngineConfig] = None,
        time_source: Callable[[], float] = time.monotonic,
    ):
        self.config = config or EngineConfig()
        self._scene = scene
        self.clock = PlaybackClock(scene.duration, time_source)
        self.sync = LiveSync(output)
        self._closed = False

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def closed(self) -> bool:
        return self._closed

    def set_scene(self, scene: Scene) -> None:
        self._scene = scene
        self.clock.set_duration(scene.duration)
        if self.clock.is_playing:
            self.sync.sync(scene.audio_clips, self.clock.current_time)

    def play(self) -> None:
        self.clock.play()
        self.sync.resync(self._scene.audio_clips, self.clock.current_time)

    def pause(self) -> None:
        self.clock.pause()
        self.sync.stop_all()

    def toggle(self) -> None:
        if self.clock.is_playing:
            self.pause()
        else:
            self.play()

    def stop(self) -> None:
        self.clock.stop()
        self.sync.stop_all()

    def scrub(self, time_: float) -> float:
        position = self.clock.scrub(time_)
        if self.clock.is_playing:
            self.sync.resync(self._scene.audio_clips, position)
        return position

    def tick(self) -> PreviewFrame:
        """Avanza el reloj y devuelve el frame del cursor."""
        was_playing = self.clock.is_playing
        current = self.clock.update()
        audible = audible_clips_at(self._scene.audio_clips, current)

        if self.clock.is_playing:
            self.sync.sync(self._scene.audio_clips, current)
            frame = resolve_frame(self._scene, current, audible=audible)
        else:
            if was_playing:
                self.sync.stop_all()
            frame = resolve_frame(self._scene, current)

        return PreviewFrame(current, frame, audible)

    async def run(
        self,
        on_frame: Callable[[PreviewFrame], None],
        until: Optional[Callable[[PreviewFrame], bool]] = None,
    ) -> None:
        """
        Bucle de vista previa a `config.preview_tick` segundos por tick.

        Args:
            on_frame: Recibe cada PreviewFrame
            until: Condición de salida evaluada después de cada frame
        """
        try:
            while not self._closed:
                preview = self.tick()
                on_frame(preview)
                if until is not None and until(preview):
                    break
                await asyncio.sleep(self.config.preview_tick)
        finally:
            self.sync.stop_all()

    def enter_export(self) -> None:
        """Detiene la vista previa antes de exportar."""
        logger.info("Deteniendo vista previa para exportar")
        self.pause()

    def close(self) -> None:
        self.pause()
        self._closed = True
