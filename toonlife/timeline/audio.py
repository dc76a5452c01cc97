"""
Modelo de la línea de tiempo de audio.

Consulta de clips audibles y aritmética de mover/recortar clips. Todas las
funciones son puras: devuelven clips nuevos y nunca tocan la escena.
"""
import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Literal, NamedTuple, Optional

from ..domain.models import AudioClip, CLIP_EPSILON, Scene
from ..errors import InvalidClipEdit

logger = logging.getLogger(__name__)

MIN_CLIP_DURATION = 0.1

DragMode = Literal["move", "trim-start", "trim-end"]


class AudibleClip(NamedTuple):
    """Clip que suena en un instante y su posición de lectura en la fuente."""
    clip: AudioClip
    internal_offset: float

    @property
    def rate(self) -> float:
        return self.clip.playback_rate


def playback_rate(pitch: Optional[float]) -> float:
    """Semitonos -> multiplicador de velocidad (2 ** (pitch / 12))."""
    if not pitch:
        return 1.0
    return 2 ** (pitch / 12)


def audible_clips_at(clips: Iterable[AudioClip], time: float) -> list[AudibleClip]:
    """
    Clips audibles en `time`, con ventana semiabierta [start, start + duration).

    Args:
        clips: Clips de la escena (se conserva su orden)
        time: Tiempo de timeline en segundos

    Returns:
        Lista de AudibleClip con el offset interno de cada fuente
    """
    audible = []
    for clip in clips:
        if clip.start <= time < clip.start + clip.duration:
            audible.append(AudibleClip(clip, clip.offset + (time - clip.start)))
    return audible


def _check_window(clip: AudioClip, offset: float, duration: float) -> None:
    if offset < 0:
        raise InvalidClipEdit(
            f"El clip '{clip.name or clip.id}' no puede empezar antes de su fuente (offset {offset:.3f}s)"
        )
    if offset + duration > clip.source_duration + CLIP_EPSILON:
        raise InvalidClipEdit(
            f"El clip '{clip.name or clip.id}' excede su fuente: "
            f"{offset + duration:.3f}s > {clip.source_duration:.3f}s"
        )


def move_clip(clip: AudioClip, delta: float) -> AudioClip:
    """Desplaza el clip; el inicio nunca queda antes de 0."""
    start = max(0.0, clip.start + delta)
    return clip.model_copy(update={"start": start})


def trim_clip_start(clip: AudioClip, delta: float) -> AudioClip:
    """
    Mueve el borde izquierdo. El borde derecho queda fijo mientras la
    duración no llegue al mínimo, y la lectura en la fuente avanza lo mismo
    que el inicio.

    Raises:
        InvalidClipEdit: si la ventana resultante sale de la fuente
    """
    start = max(0.0, clip.start + delta)
    shift = start - clip.start
    duration = max(MIN_CLIP_DURATION, clip.duration - shift)
    offset = clip.offset + shift
    _check_window(clip, offset, duration)
    return clip.model_copy(update={"start": start, "duration": duration, "offset": offset})


def trim_clip_end(clip: AudioClip, delta: float) -> AudioClip:
    """
    Mueve el borde derecho.

    Raises:
        InvalidClipEdit: si la ventana resultante sale de la fuente
    """
    duration = max(MIN_CLIP_DURATION, clip.duration + delta)
    _check_window(clip, clip.offset, duration)
    return clip.model_copy(update={"duration": duration})


_EDITS = {
    "move": move_clip,
    "trim-start": trim_clip_start,
    "trim-end": trim_clip_end,
}


def seconds_from_pixels(dx: float, timeline_width_px: float, duration: float) -> float:
    """Convierte un desplazamiento del puntero en segundos de timeline."""
    if timeline_width_px <= 0:
        return 0.0
    return dx / timeline_width_px * duration


class ClipDragController:
    """
    Gesto de arrastre/recorte sobre un único clip.

    Solo puede haber un gesto activo. Cada update parte del clip tal como
    estaba al iniciar el gesto, así que los deltas son acumulados.
    """

    def __init__(self):
        self._original: Optional[AudioClip] = None
        self._mode: Optional[DragMode] = None

    @property
    def active(self) -> bool:
        return self._original is not None

    @property
    def clip_id(self) -> Optional[str]:
        return self._original.id if self._original else None

    @property
    def mode(self) -> Optional[DragMode]:
        return self._mode

    def begin(self, clip: AudioClip, mode: DragMode) -> None:
        if mode not in _EDITS:
            raise ValueError(f"Modo de arrastre inválido: {mode}")
        if self.active:
            raise RuntimeError(f"Ya hay un arrastre activo sobre el clip {self.clip_id}")
        self._original = clip
        self._mode = mode
        logger.debug(f"Arrastre '{mode}' iniciado sobre {clip.id}")

    def update(self, scene: Scene, delta_seconds: float) -> Scene:
        """
        Aplica el delta acumulado y devuelve la escena nueva.
        Una edición inválida deja la escena sin cambios.
        """
        if not self.active:
            return scene
        current = scene.find_clip(self._original.id)
        if current is None:
            return scene
        try:
            edited = _EDITS[self._mode](self._original, delta_seconds)
        except InvalidClipEdit as e:
            logger.debug(f"Edición rechazada durante el arrastre: {e}")
            return scene
        clips = tuple(edited if c.id == edited.id else c for c in scene.audio_clips)
        return scene.model_copy(update={"audio_clips": clips})

    def end(self) -> None:
        if self.active:
            logger.debug(f"Arrastre '{self._mode}' finalizado sobre {self._original.id}")
        self._original = None
        self._mode = None

    @contextmanager
    def dragging(self, clip: AudioClip, mode: DragMode) -> Iterator["ClipDragController"]:
        """Gesto completo: el arrastre se libera aunque un update falle."""
        self.begin(clip, mode)
        try:
            yield self
        finally:
            self.end()
