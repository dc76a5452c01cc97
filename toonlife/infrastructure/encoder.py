"""
Encoder de video con FFmpeg.
Recibe frames RGB por stdin y la mezcla de audio ya renderizada, y produce
un MP4 H.264 + AAC.
"""
import logging
import subprocess
import threading
import uuid
from pathlib import Path
from typing import IO, Optional, Protocol

from PIL import Image
from pydub import AudioSegment

from ..config import EngineConfig
from ..errors import EncoderFailure

logger = logging.getLogger(__name__)


class Encoder(Protocol):
    """Destino de los frames y el audio de una exportación."""

    def open(self, output_path: Path, width: int, height: int, fps: int, audio: AudioSegment) -> None: ...

    def write_frame(self, image: Image.Image) -> None: ...

    def close(self) -> Path: ...

    def abort(self) -> None: ...


class FFmpegEncoder:
    """
    Codifica con un proceso ffmpeg.

    La salida se escribe en `<nombre>.partial.mp4` y solo se renombra al
    nombre final si ffmpeg termina bien.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.ffmpeg = self.config.ffmpeg_bin
        self.temp_dir = Path(self.config.temp_dir)

        self._process: Optional[subprocess.Popen] = None
        self._stderr_file: Optional[IO[bytes]] = None
        self._stderr_path: Optional[Path] = None
        self._audio_path: Optional[Path] = None
        self._partial_path: Optional[Path] = None
        self._output_path: Optional[Path] = None
        self._frame_size: tuple[int, int] = (0, 0)
        self._abort_lock = threading.RLock()

    def _check_ffmpeg(self) -> bool:
        """Verifica que FFmpeg esté instalado."""
        try:
            subprocess.run([self.ffmpeg, "-version"], capture_output=True, check=True)
            return True
        except (subprocess.CalledProcessError, OSError):
            return False

    def _check_qsv(self) -> bool:
        """Verifica si el encoder h264_qsv está disponible."""
        try:
            result = subprocess.run([self.ffmpeg, "-encoders"], capture_output=True, text=True)
            return "h264_qsv" in result.stdout
        except (subprocess.SubprocessError, OSError):
            return False

    def _video_codec(self) -> list[str]:
        if self.config.hw_accel in ("auto", "qsv"):
            if self._check_qsv():
                logger.info("Aceleración Intel QSV activada")
                return ["-c:v", "h264_qsv", "-global_quality", "23", "-look_ahead", "1"]
            if self.config.hw_accel == "qsv":
                logger.warning("Intel QSV no disponible, usando CPU")
        return ["-c:v", "libx264", "-preset", "medium", "-crf", "23"]

    @property
    def is_open(self) -> bool:
        return self._process is not None

    def open(self, output_path: Path, width: int, height: int, fps: int, audio: AudioSegment) -> None:
        """
        Arranca ffmpeg.

        Args:
            output_path: Ruta final del MP4
            width: Ancho de los frames
            height: Alto de los frames
            fps: Frames por segundo
            audio: Mezcla completa de la escena

        Raises:
            EncoderFailure: si ffmpeg no está disponible o no arranca
        """
        if self._process is not None:
            raise RuntimeError("El encoder ya está abierto")
        if not self._check_ffmpeg():
            raise EncoderFailure(f"FFmpeg no encontrado: {self.ffmpeg}")

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.temp_dir.mkdir(parents=True, exist_ok=True)

        token = uuid.uuid4().hex[:8]
        self._output_path = output_path
        self._partial_path = output_path.with_name(f"{output_path.stem}.partial.mp4")
        self._audio_path = self.temp_dir / f"{output_path.stem}_{token}.wav"
        self._stderr_path = self.temp_dir / f"{output_path.stem}_{token}.log"
        self._frame_size = (width, height)

        audio.export(str(self._audio_path), format="wav")

        cmd = [
            self.ffmpeg, "-y",
            "-f", "rawvideo",
            "-pix_fmt", "rgb24",
            "-s", f"{width}x{height}",
            "-r", str(fps),
            "-i", "-",
            "-i", str(self._audio_path),
            *self._video_codec(),
            "-pix_fmt", "yuv420p",
            "-c:a", "aac",
            "-b:a", "192k",
            "-movflags", "+faststart",
            "-f", "mp4",
            str(self._partial_path),
        ]

        self._stderr_file = open(self._stderr_path, "w+b")
        try:
            self._process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=self._stderr_file,
            )
        except OSError as e:
            self._cleanup()
            raise EncoderFailure(f"No se pudo iniciar FFmpeg: {e}") from e

        logger.info(f"Encoder iniciado: {width}x{height} @ {fps}fps -> {output_path}")

    def write_frame(self, image: Image.Image) -> None:
        process = self._process
        if process is None:
            raise RuntimeError("El encoder no está abierto")
        if image.size != self._frame_size:
            raise ValueError(f"Tamaño de frame {image.size} distinto de {self._frame_size}")

        data = image.convert("RGB").tobytes()
        try:
            process.stdin.write(data)
        except (OSError, ValueError) as e:
            # ValueError: stdin cerrado por un abort concurrente
            stderr = self._read_stderr()
            self.abort()
            raise EncoderFailure("FFmpeg cerró la entrada de video", stderr) from e

    def close(self) -> Path:
        """
        Termina la codificación y mueve el archivo a su ruta final.

        Raises:
            EncoderFailure: si ffmpeg termina con error
        """
        if self._process is None:
            raise RuntimeError("El encoder no está abierto")

        try:
            self._process.stdin.close()
        except OSError:
            logger.debug("stdin de FFmpeg ya estaba cerrado")
        returncode = self._process.wait()

        if returncode != 0:
            stderr = self._read_stderr()
            logger.error(f"FFmpeg terminó con código {returncode}")
            self.abort()
            raise EncoderFailure(f"FFmpeg terminó con código {returncode}", stderr)

        self._partial_path.replace(self._output_path)
        output = self._output_path
        self._process = None
        self._cleanup()
        logger.info(f"Video exportado: {output}")
        return output

    def abort(self) -> None:
        """
        Mata ffmpeg y borra los archivos temporales y parciales.
        Se puede llamar desde otro hilo mientras hay una escritura en curso.
        """
        with self._abort_lock:
            process, self._process = self._process, None
            if process is not None:
                if process.poll() is None:
                    process.kill()
                try:
                    process.stdin.close()
                except (OSError, ValueError):
                    logger.debug("stdin de FFmpeg ya estaba cerrado")
                process.wait()
                logger.info("Encoder abortado")

            if self._partial_path is not None:
                self._partial_path.unlink(missing_ok=True)
            self._cleanup()

    def _read_stderr(self) -> Optional[str]:
        if self._stderr_file is None:
            return None
        self._stderr_file.flush()
        self._stderr_file.seek(0)
        return self._stderr_file.read().decode(errors="replace")[-4000:]

    def _cleanup(self) -> None:
        if self._stderr_file is not None:
            self._stderr_file.close()
            self._stderr_file = None
        for path in (self._audio_path, self._stderr_path):
            if path is not None:
                path.unlink(missing_ok=True)
        self._audio_path = None
        self._stderr_path = None
        self._partial_path = None
