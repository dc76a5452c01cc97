"""
Pre-mezcla de audio para exportación.

Produce un único buffer de exactamente `scene.duration` segundos con todos
los clips superpuestos en su posición. No depende del reloj real: el mismo
input produce siempre las mismas muestras.
"""
import logging
from typing import Optional, Protocol

from pydub import AudioSegment

from ..domain.models import AudioClip, Scene

logger = logging.getLogger(__name__)


class AudioSource(Protocol):
    def get_audio(self, ref: str) -> Optional[AudioSegment]: ...


class AudioMixer:
    """Mezclador offline basado en pydub (PCM 16 bits)."""

    SAMPLE_WIDTH = 2

    def __init__(self, sample_rate: int = 44100, channels: int = 2):
        self.sample_rate = sample_rate
        self.channels = channels

    def _normalize(self, segment: AudioSegment) -> AudioSegment:
        return (
            segment.set_frame_rate(self.sample_rate)
            .set_channels(self.channels)
            .set_sample_width(self.SAMPLE_WIDTH)
        )

    def frame_count(self, duration: float) -> int:
        return round(duration * self.sample_rate)

    def _silence(self, frames: int) -> AudioSegment:
        data = b"\x00" * (frames * self.SAMPLE_WIDTH * self.channels)
        return AudioSegment(
            data=data,
            sample_width=self.SAMPLE_WIDTH,
            frame_rate=self.sample_rate,
            channels=self.channels,
        )

    def silent_base(self, duration: float) -> AudioSegment:
        """Silencio de round(duration * sample_rate) frames exactos."""
        return self._silence(self.frame_count(duration))

    def _fit(self, segment: AudioSegment, frames: int) -> AudioSegment:
        # overlay trabaja en milisegundos y puede perder el último frame
        current = int(segment.frame_count())
        if current > frames:
            return segment.get_sample_slice(0, frames)
        if current < frames:
            return segment + self._silence(frames - current)
        return segment

    def render_clip(self, source: AudioSegment, clip: AudioClip) -> AudioSegment:
        """
        Renderiza un clip tal como suena en la línea de tiempo.

        Con pitch la fuente se consume a `rate` veces tiempo real: se lee la
        ventana [offset, offset + duration * rate) y se comprime a `duration`.
        Si la fuente se acaba antes, el clip queda más corto.
        """
        source = self._normalize(source)
        rate = clip.playback_rate

        first = round(clip.offset * self.sample_rate)
        last = round((clip.offset + clip.duration * rate) * self.sample_rate)
        window = source.get_sample_slice(first, last)

        if rate != 1.0:
            # Reinterpretar la frecuencia cambia velocidad y tono a la vez
            shifted = window._spawn(
                window.raw_data,
                overrides={"frame_rate": int(round(self.sample_rate * rate))},
            )
            window = shifted.set_frame_rate(self.sample_rate)

        target = round(clip.duration * self.sample_rate)
        if int(window.frame_count()) > target:
            window = window.get_sample_slice(0, target)
        return window

    def mix(self, scene: Scene, loader: AudioSource) -> AudioSegment:
        """
        Mezcla todos los clips de la escena.

        Args:
            scene: Escena a mezclar
            loader: Proveedor de audio decodificado (get_audio)

        Returns:
            AudioSegment de longitud fija (lo que pasa del final se corta)
        """
        mix = self.silent_base(scene.duration)
        clips = sorted(scene.audio_clips, key=lambda c: (c.start, c.id))
        logger.info(f"Mezclando {len(clips)} clips en {scene.duration:.2f}s de audio")

        for clip in clips:
            if clip.start >= scene.duration:
                logger.debug(f"Clip '{clip.name or clip.id}' empieza después del final, se omite")
                continue
            source = loader.get_audio(clip.source)
            if source is None:
                logger.warning(f"Audio no disponible para el clip '{clip.name or clip.id}', se omite")
                continue
            rendered = self.render_clip(source, clip)
            mix = mix.overlay(rendered, position=clip.start * 1000)

        return self._fit(mix, self.frame_count(scene.duration))
