"""
Operaciones de edición sobre la escena.

Cada operación recibe la escena actual y devuelve una escena nueva
(copy-on-write). La escena de entrada nunca se modifica; las partes no
tocadas se comparten porque son inmutables.
"""
import logging
from typing import Callable, Literal

from pydantic import ValidationError

from ..errors import InvalidClipEdit
from .models import (
    AudioClip,
    CharacterItem,
    CharacterTemplate,
    Keyframe,
    PhotoItem,
    Scene,
    SceneItem,
    TextItem,
    UploadedAsset,
    new_id,
)

logger = logging.getLogger(__name__)

LayerDirection = Literal["forward", "backward"]


def _keyframe(scene: Scene, index: int) -> Keyframe:
    if not 0 <= index < len(scene.keyframes):
        raise IndexError(f"Keyframe {index} fuera de rango (total {len(scene.keyframes)})")
    return scene.keyframes[index]


def _modify_keyframe(scene: Scene, index: int, modifier: Callable[[Keyframe], Keyframe]) -> Scene:
    keyframe = _keyframe(scene, index)
    updated = modifier(keyframe)
    if updated is keyframe:
        return scene
    keyframes = list(scene.keyframes)
    keyframes[index] = updated
    return scene.model_copy(update={"keyframes": tuple(keyframes)})


def _map_items(keyframe: Keyframe, mapper: Callable[[SceneItem], SceneItem]) -> Keyframe:
    return keyframe.model_copy(update={
        "characters": tuple(mapper(item) for item in keyframe.characters),
        "text_items": tuple(mapper(item) for item in keyframe.text_items),
        "photos": tuple(mapper(item) for item in keyframe.photos),
    })


# ============================================================================
# ELEMENTOS
# ============================================================================

def add_character(scene: Scene, keyframe_index: int, template: CharacterTemplate) -> Scene:
    """Coloca una instancia nueva del personaje con su primera pose."""
    def modifier(kf: Keyframe) -> Keyframe:
        character = CharacterItem(
            asset_id=template.id,
            name=template.name,
            poses=template.poses,
            pose=template.poses[0].name if template.poses else "",
            animations=template.animations,
            x=50, y=50, width=150, height=300,
            z_index=kf.max_z_index() + 1,
        )
        return kf.model_copy(update={"characters": kf.characters + (character,)})

    return _modify_keyframe(scene, keyframe_index, modifier)


def add_photo(scene: Scene, keyframe_index: int, photo: UploadedAsset) -> Scene:
    def modifier(kf: Keyframe) -> Keyframe:
        item = PhotoItem(
            asset_id=photo.id,
            name=photo.name,
            image=photo.url,
            x=50, y=50, width=200, height=200,
            z_index=kf.max_z_index() + 1,
        )
        return kf.model_copy(update={"photos": kf.photos + (item,)})

    return _modify_keyframe(scene, keyframe_index, modifier)


def add_text(scene: Scene, keyframe_index: int, text: str) -> Scene:
    def modifier(kf: Keyframe) -> Keyframe:
        item = TextItem(
            asset_id=new_id(),
            text=text,
            x=100, y=100, width=300, height=100,
            z_index=kf.max_z_index() + 1,
            color="#FFFFFF", font_size=48, font_family="Arial",
        )
        return kf.model_copy(update={"text_items": kf.text_items + (item,)})

    return _modify_keyframe(scene, keyframe_index, modifier)


def parse_dialogue_lines(script: str) -> list[str]:
    """
    Extrae las líneas de diálogo de un guión.
    "Personaje: texto" conserva solo lo que sigue a los primeros dos puntos.
    """
    dialogue = []
    for line in script.split("\n"):
        if not line.strip():
            continue
        parts = line.split(":")
        text = ":".join(parts[1:]).strip() if len(parts) > 1 else line.strip()
        if text:
            dialogue.append(text)
    return dialogue


def add_script_lines(scene: Scene, keyframe_index: int, script: str) -> Scene:
    """Convierte cada línea de diálogo en un texto escalonado."""
    lines = parse_dialogue_lines(script)
    if not lines:
        return scene

    def modifier(kf: Keyframe) -> Keyframe:
        z_index = kf.max_z_index()
        items = []
        for i, text in enumerate(lines):
            z_index += 1
            items.append(TextItem(
                asset_id=new_id(),
                text=text,
                x=50 + i * 10, y=50 + i * 10, width=300, height=50,
                z_index=z_index,
                color="#FFFFFF", font_size=24, font_family="Arial",
            ))
        return kf.model_copy(update={"text_items": kf.text_items + tuple(items)})

    return _modify_keyframe(scene, keyframe_index, modifier)


def update_item(scene: Scene, keyframe_index: int, instance_id: str, /, **changes) -> Scene:
    """
    Actualiza campos de un elemento. Los cambios se validan con el modelo
    del elemento; `kind` e `instance_id` no se pueden cambiar.
    """
    changes.pop("kind", None)
    changes.pop("instance_id", None)

    def modifier(kf: Keyframe) -> Keyframe:
        if kf.find(instance_id) is None:
            return kf

        def mapper(item: SceneItem) -> SceneItem:
            if item.instance_id != instance_id:
                return item
            return type(item).model_validate({**item.model_dump(), **changes})

        return _map_items(kf, mapper)

    return _modify_keyframe(scene, keyframe_index, modifier)


def delete_item(scene: Scene, keyframe_index: int, instance_id: str) -> Scene:
    def modifier(kf: Keyframe) -> Keyframe:
        if kf.find(instance_id) is None:
            return kf
        keep = lambda item: item.instance_id != instance_id
        return kf.model_copy(update={
            "characters": tuple(filter(keep, kf.characters)),
            "text_items": tuple(filter(keep, kf.text_items)),
            "photos": tuple(filter(keep, kf.photos)),
        })

    return _modify_keyframe(scene, keyframe_index, modifier)


def change_layer(
    scene: Scene,
    keyframe_index: int,
    instance_id: str,
    direction: LayerDirection,
) -> Scene:
    """
    Sube o baja un elemento una capa intercambiando su z_index con el
    vecino en el orden de apilado. Solo cambian esos dos valores.
    """
    if direction not in ("forward", "backward"):
        raise ValueError(f"Dirección de capa inválida: {direction}")

    def modifier(kf: Keyframe) -> Keyframe:
        ordered = sorted(kf.items(), key=lambda item: item.z_index)
        positions = [item.instance_id for item in ordered]
        if instance_id not in positions:
            return kf

        current = positions.index(instance_id)
        neighbour = current + 1 if direction == "forward" else current - 1
        if not 0 <= neighbour < len(ordered):
            return kf

        item_a, item_b = ordered[current], ordered[neighbour]
        swapped = {
            item_a.instance_id: item_a.model_copy(update={"z_index": item_b.z_index}),
            item_b.instance_id: item_b.model_copy(update={"z_index": item_a.z_index}),
        }
        return _map_items(kf, lambda item: swapped.get(item.instance_id, item))

    return _modify_keyframe(scene, keyframe_index, modifier)


def apply_animation_preset(scene: Scene, keyframe_index: int, instance_id: str, preset_name: str) -> Scene:
    """Los presets son metadata inerte: la escena no cambia."""
    _keyframe(scene, keyframe_index)
    logger.info(f"Preset '{preset_name}' solicitado para {instance_id}; los presets no se aplican")
    return scene


# ============================================================================
# KEYFRAMES Y ESCENA
# ============================================================================

def add_keyframe(scene: Scene, after_index: int) -> Scene:
    """
    Duplica el keyframe `after_index` justo después de él.
    El duplicado recibe id nuevo pero conserva los instance_id de sus
    elementos, que es lo que permite interpolar entre ambos.
    """
    source = _keyframe(scene, after_index)
    duplicate = source.model_copy(update={"id": new_id()})
    keyframes = list(scene.keyframes)
    keyframes.insert(after_index + 1, duplicate)
    return scene.model_copy(update={"keyframes": tuple(keyframes)})


def delete_keyframe(scene: Scene, index: int) -> Scene:
    """Elimina un keyframe. Con un solo keyframe no hace nada."""
    if len(scene.keyframes) <= 1:
        logger.debug("No se puede eliminar el único keyframe de la escena")
        return scene
    _keyframe(scene, index)
    keyframes = scene.keyframes[:index] + scene.keyframes[index + 1:]
    return scene.model_copy(update={"keyframes": keyframes})


def set_background(scene: Scene, image: str) -> Scene:
    return scene.model_copy(update={"background": image})


def set_duration(scene: Scene, seconds: float) -> Scene:
    if seconds <= 0:
        raise ValueError(f"La duración debe ser positiva (recibido {seconds})")
    return scene.model_copy(update={"duration": float(seconds)})


# ============================================================================
# CLIPS DE AUDIO
# ============================================================================

def add_audio_clip(scene: Scene, clip: AudioClip) -> Scene:
    """Agrega el clip con un id nuevo."""
    new_clip = clip.model_copy(update={"id": new_id()})
    return scene.model_copy(update={"audio_clips": scene.audio_clips + (new_clip,)})


def update_audio_clip(scene: Scene, clip_id: str, **changes) -> Scene:
    """
    Actualiza un clip validando sus invariantes.

    Raises:
        InvalidClipEdit: si el resultado violaría la ventana de la fuente
    """
    clip = scene.find_clip(clip_id)
    if clip is None:
        return scene
    changes.pop("id", None)
    try:
        updated = AudioClip.model_validate({**clip.model_dump(), **changes})
    except ValidationError as e:
        raise InvalidClipEdit(f"Edición rechazada para el clip {clip_id}: {e}") from e
    return replace_audio_clip(scene, updated)


def replace_audio_clip(scene: Scene, clip: AudioClip) -> Scene:
    """Reemplaza el clip con el mismo id. Id desconocido: sin cambios."""
    if scene.find_clip(clip.id) is None:
        return scene
    clips = tuple(clip if c.id == clip.id else c for c in scene.audio_clips)
    return scene.model_copy(update={"audio_clips": clips})


def remove_audio_clip(scene: Scene, clip_id: str) -> Scene:
    if scene.find_clip(clip_id) is None:
        return scene
    clips = tuple(c for c in scene.audio_clips if c.id != clip_id)
    return scene.model_copy(update={"audio_clips": clips})
