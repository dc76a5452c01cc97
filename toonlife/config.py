"""
Configuración del motor.
Se carga desde config/config.yaml y se puede sobreescribir con variables
de entorno TOONLIFE_<CAMPO> (también desde un archivo .env).
"""

import logging
import os
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "TOONLIFE_"
DEFAULT_CONFIG_PATH = "config/config.yaml"


class EngineConfig(BaseModel):
    """Parámetros de preview y exportación."""

    # Resolución de exportación
    export_width: int = Field(1280, gt=0)
    export_height: int = Field(720, gt=0)
    fps: int = Field(30, gt=0)

    # Espacio de coordenadas en el que se editan los elementos
    stage_width: int = Field(1280, gt=0)
    stage_height: int = Field(720, gt=0)

    # Audio
    sample_rate: int = Field(44100, gt=0)
    channels: int = Field(2, ge=1, le=2)

    # Directorios
    assets_root: str = "."
    output_dir: str = "./output"
    temp_dir: str = "./temp"
    cache_dir: str = "./cache"

    # Encoder
    hw_accel: Literal["auto", "qsv", "none"] = "auto"
    ffmpeg_bin: str = "ffmpeg"

    # Preview en vivo
    preview_tick: float = Field(0.05, gt=0)

    default_font: str = "DejaVuSans.ttf"

    @property
    def stage_scale(self) -> tuple[float, float]:
        """Factor de escala escenario -> resolución de exportación."""
        return (
            self.export_width / self.stage_width,
            self.export_height / self.stage_height,
        )


def _env_overrides() -> dict:
    """Lee las variables TOONLIFE_* que correspondan a campos conocidos."""
    overrides = {}
    for field_name in EngineConfig.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
        if value is not None:
            overrides[field_name] = value
    return overrides


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Carga la configuración del motor.

    Args:
        path: Ruta al YAML (por defecto config/config.yaml). Si no existe
            se usan los valores por defecto.

    Returns:
        EngineConfig validada
    """
    load_dotenv()

    config_path = Path(path or DEFAULT_CONFIG_PATH)
    data = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Configuración cargada desde {config_path}")
    else:
        logger.debug(f"No existe {config_path}, usando valores por defecto")

    data.update(_env_overrides())
    return EngineConfig(**data)
