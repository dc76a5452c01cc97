"""Fixtures compartidos."""

from pathlib import Path

import pytest
from PIL import Image
from pydub.generators import Sine

from toonlife.config import EngineConfig
from toonlife.domain.models import AudioClip, CharacterItem, Keyframe, Scene, TrackId


@pytest.fixture
def small_config(tmp_path) -> EngineConfig:
    """Configuración de exportación pequeña para tests rápidos."""
    return EngineConfig(
        export_width=160,
        export_height=90,
        stage_width=160,
        stage_height=90,
        assets_root=str(tmp_path),
        output_dir=str(tmp_path / "output"),
        temp_dir=str(tmp_path / "temp"),
        cache_dir=str(tmp_path / "cache"),
        hw_accel="none",
    )


@pytest.fixture
def make_clip():
    """Fábrica de clips con valores por defecto válidos."""
    def factory(**overrides) -> AudioClip:
        data = {
            "name": "clip",
            "source": "/audio/clip.wav",
            "track": TrackId.SFX,
            "start": 2.0,
            "duration": 3.0,
            "source_duration": 5.0,
            "offset": 0.0,
        }
        data.update(overrides)
        return AudioClip(**data)

    return factory


@pytest.fixture
def write_wav(tmp_path):
    """Escribe un seno de `seconds` segundos como WAV y devuelve su ruta."""
    def factory(name: str = "tone.wav", seconds: float = 1.0, freq: int = 440) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        segment = Sine(freq).to_audio_segment(duration=seconds * 1000, volume=-6.0)
        segment.export(str(path), format="wav")
        return path

    return factory


@pytest.fixture
def write_png(tmp_path):
    """Escribe una imagen de un color sólido y devuelve su ruta."""
    def factory(name: str = "image.png", color=(255, 0, 0), size=(40, 40)) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color).save(path)
        return path

    return factory


@pytest.fixture
def astro() -> CharacterItem:
    return CharacterItem(
        asset_id="char1",
        instance_id="astro-1",
        name="Captain Astro",
        poses={
            "idle": "/characters/astro-idle.png",
            "talking": "/characters/astro-talking.png",
        },
        x=0, y=0, width=100, height=200, rotation=0, scale=1, z_index=0,
    )


@pytest.fixture
def two_keyframe_scene(astro) -> Scene:
    """Personaje que va de x=0 a x=100 en 10 segundos."""
    moved = astro.model_copy(update={"x": 100.0, "width": 200.0, "rotation": 90.0, "flip_h": True})
    return Scene(
        background="/backgrounds/stage.png",
        keyframes=(Keyframe(characters=(astro,)), Keyframe(characters=(moved,))),
        duration=10.0,
    )
