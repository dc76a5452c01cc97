"""
Carga de assets (imágenes y audio) para preview y exportación.

Las referencias son handles tipo URL producidos por la capa de catálogo.
Un asset que no se puede cargar se registra como AssetUnavailable y se
salta; nunca detiene la exportación.
"""
import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional
from urllib.parse import unquote, urlparse

from PIL import Image
from pydub import AudioSegment

from ..domain.models import CharacterItem, PhotoItem, Scene
from ..errors import AssetUnavailable

logger = logging.getLogger(__name__)


class AssetResolver:
    """Traduce referencias de assets a rutas locales."""

    def __init__(self, assets_root: str = "."):
        self.assets_root = Path(assets_root)

    def resolve(self, ref: str) -> Path:
        """
        Resuelve una referencia.

        Args:
            ref: file:// URL, ruta absoluta existente o ruta relativa a assets_root
                (una "/" inicial se interpreta como raíz de assets)

        Returns:
            Ruta local (puede no existir)
        """
        if not ref:
            raise AssetUnavailable(ref, "referencia vacía")

        parsed = urlparse(ref)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        if parsed.scheme in ("http", "https"):
            raise AssetUnavailable(ref, "las URLs remotas no se descargan")

        path = Path(ref)
        if path.is_absolute() and path.exists():
            return path
        return self.assets_root / ref.lstrip("/")


def scene_asset_refs(scene: Scene) -> tuple[list[str], list[str]]:
    """
    Referencias de imagen y audio usadas por una escena.

    Incluye todas las poses de cada personaje (la pose "talking" de la
    vista previa también debe estar disponible).

    Returns:
        (imágenes, audios) sin duplicados y en orden de aparición
    """
    images = [scene.background] if scene.background else []
    for keyframe in scene.keyframes:
        for item in keyframe.items():
            if isinstance(item, CharacterItem):
                images.extend(pose.image for pose in item.poses)
                if item.selected_image:
                    images.append(item.selected_image)
            elif isinstance(item, PhotoItem):
                images.append(item.image)
    audio = [clip.source for clip in scene.audio_clips]
    return list(dict.fromkeys(filter(None, images))), list(dict.fromkeys(audio))


class AssetLoader:
    """
    Cache de assets decodificados con barrera de disponibilidad.

    `preload` carga todo en paralelo; `ready` indica que la última
    precarga terminó (con o sin fallos).
    """

    def __init__(self, resolver: Optional[AssetResolver] = None, sample_rate: int = 44100, channels: int = 2):
        self.resolver = resolver or AssetResolver()
        self.sample_rate = sample_rate
        self.channels = channels
        self._images: dict[str, Image.Image] = {}
        self._audio: dict[str, AudioSegment] = {}
        self._failures: dict[str, AssetUnavailable] = {}
        self._ready = asyncio.Event()

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    @property
    def failures(self) -> dict[str, AssetUnavailable]:
        return dict(self._failures)

    def load_image(self, ref: str) -> Image.Image:
        """Decodifica una imagen a RGBA."""
        path = self.resolver.resolve(ref)
        try:
            with Image.open(path) as img:
                img.load()
                return img.convert("RGBA")
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise AssetUnavailable(ref, str(e)) from e

    def load_audio(self, ref: str) -> AudioSegment:
        """Decodifica un audio al formato de mezcla (PCM 16 bits)."""
        path = self.resolver.resolve(ref)
        if not path.exists():
            raise AssetUnavailable(ref, f"no existe {path}")
        try:
            segment = AudioSegment.from_file(str(path))
        except Exception as e:
            raise AssetUnavailable(ref, f"no se pudo decodificar: {e}") from e
        return (
            segment.set_frame_rate(self.sample_rate)
            .set_channels(self.channels)
            .set_sample_width(2)
        )

    async def _load(self, kind: str, ref: str) -> None:
        loader = self.load_image if kind == "image" else self.load_audio
        try:
            asset = await asyncio.to_thread(loader, ref)
        except AssetUnavailable as e:
            logger.warning(f"Saltando {kind}: {e}")
            self._failures[ref] = e
            return

        self._failures.pop(ref, None)
        if kind == "image":
            self._images[ref] = asset
        else:
            self._audio[ref] = asset

    async def preload(self, images: Iterable[str], audio: Iterable[str]) -> None:
        """
        Carga en paralelo todas las referencias que aún no estén en cache.
        Cancelar esta corrutina cancela las cargas pendientes.
        """
        self._ready.clear()
        tasks = [self._load("image", ref) for ref in dict.fromkeys(images) if ref not in self._images]
        tasks += [self._load("audio", ref) for ref in dict.fromkeys(audio) if ref not in self._audio]

        logger.info(f"Precargando {len(tasks)} assets...")
        await asyncio.gather(*tasks)

        if self._failures:
            logger.warning(f"{len(self._failures)} assets no disponibles")
        self._ready.set()

    async def wait_ready(self) -> None:
        await self._ready.wait()

    def get_image(self, ref: str) -> Optional[Image.Image]:
        return self._images.get(ref)

    def get_audio(self, ref: str) -> Optional[AudioSegment]:
        return self._audio.get(ref)
