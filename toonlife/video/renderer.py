"""
Renderizador de exportación.
Convierte una escena en un video a resolución y fps fijos: precarga de
assets, pre-mezcla de audio y generación de frames con un reloj lógico.
"""

import asyncio
import logging
import math
from pathlib import Path
from typing import Callable, Optional, Union

from ..audio.mixer import AudioMixer
from ..config import EngineConfig
from ..domain.models import Scene, VisualFrame
from ..infrastructure.assets import AssetLoader, AssetResolver, scene_asset_refs
from ..infrastructure.compositor import FrameCompositor
from ..infrastructure.encoder import Encoder, FFmpegEncoder
from ..timeline.interpolation import resolve_frame

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

# Tramos de progreso: precarga, mezcla, frames
PRELOAD_DONE = 10.0
MIX_DONE = 30.0


def frame_timestamps(duration: float, fps: int) -> list[float]:
    """Tiempos i / fps para los ceil(duration * fps) frames de la escena."""
    count = math.ceil(duration * fps - 1e-9)
    return [i / fps for i in range(count)]


class _Progress:
    """Reporta progreso sin retroceder nunca."""

    def __init__(self, callback: Optional[ProgressCallback]):
        self.callback = callback
        self.value = -1.0

    def __call__(self, value: float) -> None:
        value = min(100.0, max(self.value, value))
        if value == self.value:
            return
        self.value = value
        if self.callback is not None:
            self.callback(value)


class ExportRenderer:
    """Exporta escenas a video de forma determinista."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        loader: Optional[AssetLoader] = None,
        encoder: Optional[Encoder] = None,
        compositor: Optional[FrameCompositor] = None,
        mixer: Optional[AudioMixer] = None,
    ):
        """
        Inicializa el renderizador.

        Args:
            config: Configuración del motor
            loader: Cargador de assets (uno nuevo por defecto, independiente de la vista previa)
            encoder: Destino de frames (FFmpegEncoder por defecto)
            compositor: Rasterizador de frames
            mixer: Mezclador de audio offline
        """
        self.config = config or EngineConfig()
        self.loader = loader or AssetLoader(
            AssetResolver(self.config.assets_root),
            self.config.sample_rate,
            self.config.channels,
        )
        self.encoder = encoder or FFmpegEncoder(self.config)
        self.compositor = compositor or FrameCompositor(self.config)
        self.mixer = mixer or AudioMixer(self.config.sample_rate, self.config.channels)

    def _write_frame(self, frame: VisualFrame) -> None:
        image = self.compositor.compose(frame, self.loader.get_image)
        self.encoder.write_frame(image)

    async def export(
        self,
        scene: Scene,
        output_path: Optional[Union[str, Path]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Exporta la escena completa.

        Args:
            scene: Escena a exportar (no se modifica)
            output_path: Ruta del video (por defecto <output_dir>/<scene.id>.mp4)
            on_progress: Recibe el progreso en [0, 100], nunca decreciente

        Returns:
            Ruta al video generado

        Raises:
            EncoderFailure: si el encoder falla (sin dejar salida parcial)
        """
        output = Path(output_path) if output_path else Path(self.config.output_dir) / f"{scene.id}.mp4"
        progress = _Progress(on_progress)
        fps = self.config.fps
        completed = False

        logger.info(f"Exportando escena {scene.id}: {scene.duration:.2f}s @ {fps}fps -> {output}")
        progress(0)

        try:
            # 1. Precarga de todos los assets referenciados
            images, audio = scene_asset_refs(scene)
            await self.loader.preload(images, audio)
            await self.loader.wait_ready()
            progress(PRELOAD_DONE)

            # 2. Pre-mezcla de audio
            mix = await asyncio.to_thread(self.mixer.mix, scene, self.loader)
            progress(MIX_DONE)

            # 3. Frames con reloj lógico
            # Pillow y la escritura a ffmpeg bloquean: se ejecutan fuera del event loop
            timestamps = frame_timestamps(scene.duration, fps)
            await asyncio.to_thread(
                self.encoder.open, output, self.config.export_width, self.config.export_height, fps, mix
            )
            for index, timestamp in enumerate(timestamps):
                frame = resolve_frame(scene, timestamp)
                await asyncio.to_thread(self._write_frame, frame)
                progress(MIX_DONE + (100.0 - MIX_DONE) * min(1.0, timestamp / scene.duration))
                if index % fps == 0:
                    logger.debug(f"Frame {index + 1}/{len(timestamps)}")
                # Punto de cancelación entre frames
                await asyncio.sleep(0)

            result = await asyncio.to_thread(self.encoder.close)
            completed = True
        finally:
            if not completed:
                logger.warning("Exportación interrumpida, descartando salida parcial")
                self.encoder.abort()

        progress(100)
        logger.info(f"Exportación completada: {result} ({len(timestamps)} frames)")
        return result
