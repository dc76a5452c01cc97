"""
Modelos de Dominio
Definen la estructura de datos central del motor: escenas, keyframes,
elementos del escenario y clips de audio.

Todos los modelos son inmutables (frozen). Una edición produce una escena
nueva; las secuencias son tuplas y los mapeos se guardan como tuplas de
modelos pequeños, de modo que dos snapshots nunca comparten estado mutable.
"""
import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_BACKGROUND = "/assets/backgrounds/space-station.jpg"
DEFAULT_SCENE_DURATION = 10.0

# Tolerancia para comparar ventanas de audio en segundos
CLIP_EPSILON = 1e-9


def new_id() -> str:
    return uuid.uuid4().hex


class FrozenModel(BaseModel):
    """Base inmutable. Acepta nombres en snake_case y camelCase."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class TrackId(str, Enum):
    """Pistas de audio independientes."""
    VOICEOVER = "voiceover"
    MUSIC = "music"
    SFX = "sfx"


class Pose(FrozenModel):
    name: str
    image: str


def _mapping_to_poses(value: Any) -> Any:
    if isinstance(value, dict):
        return [{"name": name, "image": image} for name, image in value.items()]
    return value


class PresetTrack(FrozenModel):
    """Propiedad animada por un preset (from -> to)."""
    target: str
    from_value: float
    to_value: float


class AnimationPreset(FrozenModel):
    """
    Preset de animación con nombre.
    Es metadata inerte: ninguna lógica del motor lo aplica.
    """
    name: str
    tracks: tuple[PresetTrack, ...] = Field(
        default=(), validation_alias=AliasChoices("tracks", "keyframes")
    )
    duration: float = Field(1.0, ge=0)

    @field_validator("tracks", mode="before")
    @classmethod
    def tracks_from_mapping(cls, value):
        # Formato mapeado: {"x": {"from": 0, "to": 100}}
        if isinstance(value, dict):
            return [
                {"target": prop, "from_value": pair["from"], "to_value": pair["to"]}
                for prop, pair in value.items()
            ]
        return value


# ============================================================================
# ELEMENTOS DEL ESCENARIO
# ============================================================================

class SceneItem(FrozenModel):
    """Forma común de todo elemento colocado en un keyframe."""
    asset_id: str = Field(validation_alias=AliasChoices("asset_id", "assetId", "id"))
    instance_id: str = Field(default_factory=new_id)
    x: float = 0.0
    y: float = 0.0
    width: float = Field(100.0, ge=0)
    height: float = Field(100.0, ge=0)
    rotation: float = 0.0
    scale: float = 1.0
    z_index: int = 0
    flip_h: bool = False


class CharacterItem(SceneItem):
    kind: Literal["character"] = "character"
    name: str = ""
    poses: tuple[Pose, ...] = ()
    pose: str = ""
    animations: tuple[AnimationPreset, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def default_pose(cls, data):
        # Sin pose explícita se usa la primera del mapeo
        if isinstance(data, dict) and not data.get("pose"):
            poses = _mapping_to_poses(data.get("poses"))
            if poses:
                first = poses[0]
                name = first.name if isinstance(first, Pose) else first.get("name")
                data = {**data, "pose": name}
        return data

    @field_validator("poses", mode="before")
    @classmethod
    def poses_from_mapping(cls, value):
        return _mapping_to_poses(value)

    def pose_image(self, name: str) -> Optional[str]:
        """Imagen asociada a un nombre de pose, o None."""
        for pose in self.poses:
            if pose.name == name:
                return pose.image
        return None

    @property
    def pose_names(self) -> tuple[str, ...]:
        return tuple(pose.name for pose in self.poses)

    @property
    def selected_image(self) -> Optional[str]:
        """
        Imagen de la pose seleccionada.
        `pose` puede ser el nombre de la pose o directamente su imagen.
        """
        image = self.pose_image(self.pose)
        if image is not None:
            return image
        if any(p.image == self.pose for p in self.poses):
            return self.pose
        return None


class TextItem(SceneItem):
    kind: Literal["text"] = "text"
    text: str = ""
    color: str = "#FFFFFF"
    font_size: float = Field(48.0, gt=0)
    font_family: str = "Arial"


class PhotoItem(SceneItem):
    kind: Literal["photo"] = "photo"
    name: str = ""
    image: str = Field(validation_alias=AliasChoices("image", "url"))


SceneItemVariant = Annotated[
    Union[CharacterItem, TextItem, PhotoItem],
    Field(discriminator="kind"),
]


class Keyframe(FrozenModel):
    """
    Snapshot visual completo. Su posición temporal es implícita
    (índice dentro de la escena).
    """
    id: str = Field(default_factory=new_id)
    characters: tuple[CharacterItem, ...] = ()
    text_items: tuple[TextItem, ...] = ()
    photos: tuple[PhotoItem, ...] = ()

    def items(self) -> tuple:
        """Todos los elementos: personajes, textos, fotos."""
        return self.characters + self.text_items + self.photos

    def find(self, instance_id: str) -> Optional[SceneItem]:
        for item in self.items():
            if item.instance_id == instance_id:
                return item
        return None

    def max_z_index(self) -> int:
        items = self.items()
        return max(item.z_index for item in items) if items else -1


# ============================================================================
# AUDIO
# ============================================================================

class AudioClip(FrozenModel):
    """
    Clip colocado en la línea de tiempo maestra.

    `start` y `duration` están en tiempo de timeline; `offset` es el punto
    de lectura dentro de la fuente.
    """
    id: str = Field(default_factory=new_id)
    name: str = ""
    source: str = Field(validation_alias=AliasChoices("source", "url"))
    track: TrackId = Field(validation_alias=AliasChoices("track", "trackId", "track_id"))
    start: float = Field(0.0, ge=0)
    duration: float = Field(gt=0)
    source_duration: float = Field(gt=0)
    offset: float = 0.0
    pitch: Optional[float] = None
    character_instance_id: Optional[str] = None

    @model_validator(mode="after")
    def check_source_window(self):
        if self.offset < 0:
            raise ValueError(f"offset debe ser >= 0 (recibido {self.offset})")
        if self.offset + self.duration > self.source_duration + CLIP_EPSILON:
            raise ValueError(
                f"offset + duration ({self.offset + self.duration:.3f}s) excede "
                f"la duración de la fuente ({self.source_duration:.3f}s)"
            )
        return self

    @property
    def end(self) -> float:
        return self.start + self.duration

    @property
    def playback_rate(self) -> float:
        """Multiplicador de velocidad derivado del pitch en semitonos."""
        if not self.pitch:
            return 1.0
        return 2 ** (self.pitch / 12)


# ============================================================================
# ESCENA
# ============================================================================

class Scene(FrozenModel):
    """
    Escena completa. Se reemplaza entera en cada edición (copy-on-write).
    """
    id: str = Field(default_factory=new_id)
    background: str = DEFAULT_BACKGROUND
    keyframes: tuple[Keyframe, ...] = Field(default_factory=lambda: (Keyframe(),), min_length=1)
    audio_clips: tuple[AudioClip, ...] = ()
    duration: float = Field(DEFAULT_SCENE_DURATION, gt=0)

    @classmethod
    def create(
        cls,
        background: str = DEFAULT_BACKGROUND,
        duration: float = DEFAULT_SCENE_DURATION,
    ) -> "Scene":
        """Escena inicial con un único keyframe vacío."""
        return cls(background=background, keyframes=(Keyframe(),), duration=duration)

    def keyframe_time(self, index: int) -> float:
        """Tiempo implícito del keyframe `index`: i / (N - 1) * duration."""
        count = len(self.keyframes)
        if count == 1:
            return 0.0
        return index / (count - 1) * self.duration

    def all_instance_ids(self) -> set[str]:
        """Instance ids presentes en cualquier keyframe."""
        return {item.instance_id for kf in self.keyframes for item in kf.items()}

    def find_clip(self, clip_id: str) -> Optional[AudioClip]:
        for clip in self.audio_clips:
            if clip.id == clip_id:
                return clip
        return None


# ============================================================================
# CATÁLOGOS (entradas de la capa de assets)
# ============================================================================

class CharacterTemplate(FrozenModel):
    id: str
    name: str
    poses: tuple[Pose, ...] = ()
    animations: tuple[AnimationPreset, ...] = ()

    @field_validator("poses", mode="before")
    @classmethod
    def poses_from_mapping(cls, value):
        return _mapping_to_poses(value)


class Background(FrozenModel):
    id: str
    name: str
    image: str


class SoundEffect(FrozenModel):
    name: str
    source: str = Field(validation_alias=AliasChoices("source", "url"))


class UploadedAsset(FrozenModel):
    """Foto o audio subido por el usuario (id, nombre, handle tipo url)."""
    id: str = Field(default_factory=new_id)
    name: str
    url: str


# ============================================================================
# SALIDA DEL MOTOR
# ============================================================================

class DrawableItem(FrozenModel):
    """Elemento con transformaciones resueltas, listo para pintar."""
    kind: Literal["character", "text", "photo"]
    asset_id: str
    instance_id: str
    x: float
    y: float
    width: float
    height: float
    rotation: float
    scale: float
    z_index: int
    flip_h: bool = False
    image: Optional[str] = None
    text: Optional[str] = None
    color: Optional[str] = None
    font_size: Optional[float] = None
    font_family: Optional[str] = None


class VisualFrame(FrozenModel):
    """Frame visual resuelto: fondo + elementos en orden de dibujo."""
    time: float
    background: str
    items: tuple[DrawableItem, ...] = ()
