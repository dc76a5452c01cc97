"""Módulo de utilidades"""

from .cache import DurationCache

__all__ = ["DurationCache"]
