"""
Taxonomía de errores del motor de composición.

Los errores por elemento (AssetUnavailable) se registran y se saltan;
los errores de pipeline (EncoderFailure, DeviceUnavailable) siempre se
propagan al llamador.
"""

from typing import Optional


class ToonLifeError(Exception):
    """Error base del motor."""
    pass


class AssetUnavailable(ToonLifeError):
    """Imagen o audio inexistente o imposible de decodificar."""

    def __init__(self, ref: str, reason: Optional[str] = None):
        self.ref = ref
        self.reason = reason
        message = f"Asset no disponible: {ref}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidClipEdit(ToonLifeError):
    """La edición violaría offset >= 0 u offset + duration <= source_duration."""
    pass


class DeviceUnavailable(ToonLifeError):
    """Micrófono o dispositivo de grabación denegado o ausente."""
    pass


class EncoderFailure(ToonLifeError):
    """El encoder no pudo producir el archivo de salida."""

    def __init__(self, message: str, stderr: Optional[str] = None):
        self.stderr = stderr
        super().__init__(message)
