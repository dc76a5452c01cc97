"""
Scene Parser
Valida y convierte documentos JSON de escena en objetos de dominio.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ValidationError

from ..domain.models import Scene

logger = logging.getLogger(__name__)


class SceneParser:
    """Validador y parseador de escenas serializadas."""

    def parse(self, raw_input: Union[str, Dict[str, Any]]) -> Scene:
        """
        Convierte un JSON (string o dict) en una Scene validada.

        Raises:
            ValueError: si el JSON no es válido o no describe una escena
        """
        try:
            # 1. Normalizar entrada
            if isinstance(raw_input, str):
                # Limpiar bloques de código markdown si existen
                clean_input = raw_input.replace("```json", "").replace("```", "").strip()
                data = json.loads(clean_input)
            else:
                data = raw_input

            # 2. Validación estricta con Pydantic
            scene = Scene.model_validate(data)

        except json.JSONDecodeError as e:
            logger.error(f"Error decodificando JSON de escena: {e}")
            raise ValueError("El documento no es un JSON válido") from e
        except ValidationError as e:
            logger.error(f"Escena inválida: {e}")
            raise

        # 3. Validaciones de negocio adicionales
        self._validate_logic(scene)
        return scene

    def load(self, path: Union[str, Path]) -> Scene:
        with open(path, "r", encoding="utf-8") as f:
            return self.parse(f.read())

    def _validate_logic(self, scene: Scene):
        """Avisos que no invalidan la escena."""
        for index in range(1, len(scene.keyframes)):
            previous = scene.keyframes[index - 1]
            for item in scene.keyframes[index].items():
                if previous.find(item.instance_id) is None:
                    logger.warning(
                        f"Keyframe {index}: {item.kind} {item.instance_id} no existe en el keyframe "
                        f"anterior, no se interpolará hacia él"
                    )

        instance_ids = scene.all_instance_ids()
        for clip in scene.audio_clips:
            if clip.start >= scene.duration:
                logger.warning(f"El clip '{clip.name or clip.id}' empieza después del final de la escena")
            if clip.character_instance_id and clip.character_instance_id not in instance_ids:
                logger.warning(
                    f"El clip '{clip.name or clip.id}' apunta a un personaje inexistente "
                    f"({clip.character_instance_id})"
                )
