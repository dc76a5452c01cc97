"""
Grabación de voz en off.
Captura audio desde un dispositivo y lo convierte en un clip de la pista
voiceover, opcionalmente con pitch y asociado a un personaje.
"""
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import NamedTuple, Optional, Protocol

from pydub import AudioSegment

from ..domain.models import AudioClip, TrackId
from ..errors import DeviceUnavailable
from .clips import clip_from_source

logger = logging.getLogger(__name__)


class RecordingDevice(Protocol):
    """Micrófono u otra fuente de captura."""

    def open(self) -> None: ...

    def read(self) -> AudioSegment: ...

    def close(self) -> None: ...


class Recording(NamedTuple):
    path: Path
    duration: float


class VoiceRecorder:
    """Graba una toma, la guarda como WAV y la ofrece como clip."""

    def __init__(self, device: RecordingDevice, temp_dir: str = "./temp"):
        self.device = device
        self.temp_dir = Path(temp_dir)
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    def start(self) -> None:
        """
        Abre el dispositivo.

        Raises:
            DeviceUnavailable: permiso denegado o dispositivo ausente
        """
        if self._recording:
            raise RuntimeError("Ya hay una grabación en curso")
        try:
            self.device.open()
        except OSError as e:
            # PermissionError es subclase de OSError
            logger.error(f"No se pudo acceder al micrófono: {e}")
            raise DeviceUnavailable(f"No se pudo acceder al micrófono: {e}") from e
        self._recording = True
        logger.info("Grabación iniciada")

    def stop(self) -> Recording:
        """
        Detiene la captura y escribe la toma en disco.

        Raises:
            DeviceUnavailable: el dispositivo se perdió durante la toma
        """
        if not self._recording:
            raise RuntimeError("No hay ninguna grabación en curso")
        try:
            audio = self.device.read()
        except OSError as e:
            logger.error(f"Se perdió el micrófono durante la grabación: {e}")
            raise DeviceUnavailable(f"Se perdió el micrófono durante la grabación: {e}") from e
        finally:
            self.device.close()
            self._recording = False

        duration = audio.frame_count() / audio.frame_rate if audio.frame_rate else 0.0
        if duration <= 0:
            raise ValueError("La grabación está vacía")

        self.temp_dir.mkdir(parents=True, exist_ok=True)
        path = (self.temp_dir / f"recording_{uuid.uuid4().hex[:8]}.wav").resolve()
        audio.export(str(path), format="wav")
        logger.info(f"Grabación guardada: {path.name} ({duration:.2f}s)")
        return Recording(path, duration)

    def discard(self, recording: Optional[Recording] = None) -> None:
        """Descarta la toma (y cierra el dispositivo si seguía abierto)."""
        if self._recording:
            self.device.close()
            self._recording = False
        if recording is not None:
            recording.path.unlink(missing_ok=True)

    def to_clip(
        self,
        recording: Recording,
        pitch: float = 0,
        character_instance_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> AudioClip:
        """Clip voiceover en el inicio de la escena que cubre toda la toma."""
        return clip_from_source(
            name or f"Recording {datetime.now().strftime('%H:%M:%S')}",
            recording.path.as_uri(),
            TrackId.VOICEOVER,
            recording.duration,
            pitch=pitch or None,
            character_instance_id=character_instance_id,
        )
