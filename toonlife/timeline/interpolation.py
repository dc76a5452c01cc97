"""
Motor de interpolación.
Resuelve el estado visual de la escena en cualquier instante a partir de
los keyframes, que están espaciados uniformemente en la duración.
"""
import logging
from typing import Iterable, Optional

from ..domain.models import (
    CharacterItem,
    DrawableItem,
    Keyframe,
    PhotoItem,
    Scene,
    SceneItem,
    TextItem,
    TrackId,
    VisualFrame,
)
from .audio import AudibleClip

logger = logging.getLogger(__name__)

TALKING_POSE = "talking"

# Propiedades continuas que se interpolan entre elementos emparejados
CONTINUOUS_FIELDS = ("x", "y", "width", "height", "rotation", "scale")


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def keyframe_times(scene: Scene) -> list[float]:
    return [scene.keyframe_time(i) for i in range(len(scene.keyframes))]


def bracketing_keyframes(scene: Scene, time: float) -> tuple[int, int, float]:
    """
    Par de keyframes que rodean `time` y el factor de interpolación.

    Returns:
        (índice from, índice to, t en [0, 1])
    """
    count = len(scene.keyframes)
    if count == 1:
        return 0, 0, 0.0

    times = keyframe_times(scene)
    if time <= times[0]:
        return 0, 0, 0.0
    if time >= times[-1]:
        return count - 1, count - 1, 0.0

    from_index = 0
    for i, kf_time in enumerate(times):
        if kf_time <= time:
            from_index = i
    to_index = from_index + 1

    span = times[to_index] - times[from_index]
    t = (time - times[from_index]) / span if span > 0 else 0.0
    return from_index, to_index, t


def _talking_characters(audible: Optional[Iterable[AudibleClip]]) -> set[str]:
    if not audible:
        return set()
    return {
        entry.clip.character_instance_id
        for entry in audible
        if entry.clip.track == TrackId.VOICEOVER and entry.clip.character_instance_id
    }


def _drawable(item: SceneItem, target: Optional[SceneItem], t: float, talking: set[str]) -> DrawableItem:
    # Sin pareja en el keyframe destino el elemento se mantiene en su estado de origen
    if target is None or target.kind != item.kind:
        target, t = item, 0.0

    fields = {name: lerp(getattr(item, name), getattr(target, name), t) for name in CONTINUOUS_FIELDS}
    fields.update(
        kind=item.kind,
        asset_id=item.asset_id,
        instance_id=item.instance_id,
        z_index=item.z_index,
        flip_h=item.flip_h,
    )

    if isinstance(item, CharacterItem):
        image = item.selected_image
        if item.instance_id in talking:
            image = item.pose_image(TALKING_POSE) or image
        fields["image"] = image
    elif isinstance(item, PhotoItem):
        fields["image"] = item.image
    elif isinstance(item, TextItem):
        fields.update(
            text=item.text,
            color=item.color,
            font_size=lerp(item.font_size, target.font_size, t),
            font_family=item.font_family,
        )
    return DrawableItem(**fields)


def _draw_candidates(keyframe: Keyframe) -> list[SceneItem]:
    # Desempate por categoría: personajes, fotos, textos
    return list(keyframe.characters) + list(keyframe.photos) + list(keyframe.text_items)


def resolve_frame(
    scene: Scene,
    time: float,
    audible: Optional[Iterable[AudibleClip]] = None,
) -> VisualFrame:
    """
    Calcula el frame visual de la escena en `time`.

    Args:
        scene: Escena a resolver
        time: Tiempo en segundos (se satura a los keyframes extremos)
        audible: Clips audibles en `time`. Solo la vista previa lo pasa,
            para poner en pose "talking" a los personajes con voz activa.

    Returns:
        VisualFrame con los elementos en orden de dibujo
    """
    from_index, to_index, t = bracketing_keyframes(scene, time)
    source = scene.keyframes[from_index]
    target = scene.keyframes[to_index]
    talking = _talking_characters(audible)

    items = [
        _drawable(item, target.find(item.instance_id), t, talking)
        for item in _draw_candidates(source)
    ]
    items.sort(key=lambda drawable: drawable.z_index)

    return VisualFrame(time=time, background=scene.background, items=tuple(items))
