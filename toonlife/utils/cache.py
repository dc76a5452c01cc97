"""
Cache en disco de duraciones de audio.
Evita volver a decodificar una fuente solo para conocer su duración.
"""

import hashlib
import logging
from pathlib import Path
from typing import Optional, Union

from diskcache import Cache

logger = logging.getLogger(__name__)


class DurationCache:
    """Duraciones de fuentes de audio, indexadas por ruta + mtime + tamaño."""

    def __init__(self, cache_dir: str = "./cache", ttl_hours: Optional[int] = None):
        """
        Inicializa el cache.

        Args:
            cache_dir: Directorio para almacenar el cache
            ttl_hours: Tiempo de vida en horas (None = sin expiración)
        """
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache = Cache(str(self.cache_dir / "durations"))
        self.expire = ttl_hours * 3600 if ttl_hours else None

    def _generate_key(self, path: Union[str, Path]) -> str:
        """Clave única: cambia si el archivo se modifica."""
        path = Path(path)
        stat = path.stat()
        raw = f"{path.resolve()}:{stat.st_mtime_ns}:{stat.st_size}"
        return f"duration:{hashlib.sha256(raw.encode()).hexdigest()[:16]}"

    def get(self, path: Union[str, Path]) -> Optional[float]:
        try:
            key = self._generate_key(path)
        except OSError:
            return None
        return self.cache.get(key)

    def set(self, path: Union[str, Path], duration: float) -> None:
        self.cache.set(self._generate_key(path), float(duration), expire=self.expire)

    def clear(self) -> int:
        return self.cache.clear()

    def close(self) -> None:
        self.cache.close()

    def __len__(self) -> int:
        return len(self.cache)
