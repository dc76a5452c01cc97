"""
Creación de clips a partir de fuentes de audio (efectos, música, voz).
"""
import logging
from pathlib import Path
from typing import Optional, Union

from pydub import AudioSegment

from ..domain.models import AudioClip, SoundEffect, TrackId, UploadedAsset
from ..errors import AssetUnavailable
from ..infrastructure.assets import AssetResolver
from ..utils.cache import DurationCache

logger = logging.getLogger(__name__)


def probe_duration(path: Union[str, Path], cache: Optional[DurationCache] = None) -> float:
    """
    Duración de un archivo de audio en segundos.

    Args:
        path: Ruta local al audio
        cache: Cache opcional de duraciones

    Raises:
        AssetUnavailable: si el archivo no existe o no se puede decodificar
    """
    path = Path(path)
    if not path.exists():
        raise AssetUnavailable(str(path), "archivo no encontrado")

    if cache is not None:
        cached = cache.get(path)
        if cached is not None:
            return cached

    try:
        segment = AudioSegment.from_file(str(path))
    except Exception as e:
        raise AssetUnavailable(str(path), f"no se pudo decodificar: {e}") from e

    duration = segment.frame_count() / segment.frame_rate
    if cache is not None:
        cache.set(path, duration)
    logger.debug(f"Duración de {path.name}: {duration:.3f}s")
    return duration


def clip_from_source(
    name: str,
    source: str,
    track: TrackId,
    source_duration: float,
    start: float = 0.0,
    pitch: Optional[float] = None,
    character_instance_id: Optional[str] = None,
) -> AudioClip:
    """Clip que cubre la fuente completa."""
    return AudioClip(
        name=name,
        source=source,
        track=track,
        start=start,
        duration=source_duration,
        source_duration=source_duration,
        offset=0.0,
        pitch=pitch,
        character_instance_id=character_instance_id,
    )


def clip_from_sound_effect(
    sfx: SoundEffect,
    resolver: AssetResolver,
    cache: Optional[DurationCache] = None,
) -> AudioClip:
    duration = probe_duration(resolver.resolve(sfx.source), cache)
    return clip_from_source(sfx.name, sfx.source, TrackId.SFX, duration)


def background_music_clip(
    upload: UploadedAsset,
    resolver: AssetResolver,
    cache: Optional[DurationCache] = None,
) -> AudioClip:
    duration = probe_duration(resolver.resolve(upload.url), cache)
    return clip_from_source(upload.name, upload.url, TrackId.MUSIC, duration)
