"""
Reloj de reproducción de la vista previa.
"""
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PlaybackClock:
    """
    Cursor único de reproducción.

    Al llegar al final la reproducción es de una sola pasada: el cursor
    vuelve a 0 y el reloj se detiene.
    """

    def __init__(self, duration: float, time_source: Callable[[], float] = time.monotonic):
        if duration <= 0:
            raise ValueError(f"La duración debe ser positiva (recibido {duration})")
        self._duration = float(duration)
        self._time = 0.0
        self._playing = False
        self._time_source = time_source
        self._last_tick: Optional[float] = None

    @property
    def current_time(self) -> float:
        return self._time

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def duration(self) -> float:
        return self._duration

    def play(self) -> None:
        if self._playing:
            return
        self._playing = True
        self._last_tick = self._time_source()

    def pause(self) -> None:
        self._playing = False
        self._last_tick = None

    def toggle(self) -> None:
        if self._playing:
            self.pause()
        else:
            self.play()

    def stop(self) -> None:
        self.pause()
        self._time = 0.0

    def scrub(self, time_: float) -> float:
        """Mueve el cursor sin cambiar el estado de reproducción."""
        self._time = min(max(0.0, float(time_)), self._duration)
        return self._time

    def advance(self, dt: float) -> float:
        """Avanza `dt` segundos si está reproduciendo."""
        if not self._playing:
            return self._time
        new_time = self._time + dt
        if new_time >= self._duration:
            logger.debug("Fin de la escena: cursor a 0 y reproducción detenida")
            self._time = 0.0
            self.pause()
        else:
            self._time = new_time
        return self._time

    def update(self) -> float:
        """Avanza según el tiempo real transcurrido desde la última llamada."""
        if not self._playing:
            return self._time
        now = self._time_source()
        dt = now - self._last_tick if self._last_tick is not None else 0.0
        self._last_tick = now
        return self.advance(max(0.0, dt))

    def set_duration(self, duration: float) -> None:
        if duration <= 0:
            raise ValueError(f"La duración debe ser positiva (recibido {duration})")
        self._duration = float(duration)
        self._time = min(self._time, self._duration)
