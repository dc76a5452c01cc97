"""
Sincronización de audio en vivo.

Compara el conjunto de clips que estaba sonando con el conjunto audible en
el cursor actual y arranca/detiene fuentes en la salida de audio.
"""
import logging
from typing import Iterable, Protocol

from ..domain.models import AudioClip
from ..errors import AssetUnavailable
from ..timeline.audio import AudibleClip, audible_clips_at

logger = logging.getLogger(__name__)


class AudioOutput(Protocol):
    """Salida de audio en tiempo real (fuera del motor)."""

    def start(self, clip: AudioClip, source_offset: float, rate: float) -> None: ...

    def stop(self, clip_id: str) -> None: ...


class LiveSync:
    """Mantiene la salida de audio alineada con el cursor."""

    def __init__(self, output: AudioOutput):
        self.output = output
        self._active: dict[str, AudioClip] = {}

    @property
    def active_ids(self) -> set[str]:
        return set(self._active)

    def sync(self, clips: Iterable[AudioClip], time: float) -> list[AudibleClip]:
        """
        Ajusta las fuentes activas al instante `time`.
        Evaluar dos veces el mismo instante no arranca nada de nuevo.

        Returns:
            Clips audibles en `time`
        """
        audible = audible_clips_at(clips, time)
        current = {entry.clip.id: entry for entry in audible}

        for clip_id, clip in list(self._active.items()):
            entry = current.get(clip_id)
            # Un clip editado mientras suena se reinicia con su definición nueva
            if entry is None or entry.clip != clip:
                self.output.stop(clip_id)
                del self._active[clip_id]

        for entry in audible:
            if entry.clip.id in self._active:
                continue
            try:
                self.output.start(entry.clip, entry.internal_offset, entry.rate)
            except AssetUnavailable as e:
                logger.warning(f"Clip '{entry.clip.name or entry.clip.id}' sin audio en vista previa: {e}")
            # Se marca activo igualmente para no reintentarlo en cada tick
            self._active[entry.clip.id] = entry.clip

        return audible

    def resync(self, clips: Iterable[AudioClip], time: float) -> list[AudibleClip]:
        """Desmonta todo y vuelve a sincronizar (saltos de cursor)."""
        self.stop_all()
        return self.sync(clips, time)

    def stop_all(self) -> None:
        for clip_id in list(self._active):
            self.output.stop(clip_id)
        self._active.clear()
