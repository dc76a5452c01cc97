"""
Catálogos por defecto de personajes, fondos y efectos de sonido.
"""
from typing import Optional

from .models import Background, CharacterTemplate, SoundEffect

CHARACTERS: tuple[CharacterTemplate, ...] = (
    CharacterTemplate(
        id="char1",
        name="Captain Astro",
        poses={
            "idle": "/assets/characters/astro-idle.png",
            "walking": "/assets/characters/astro-walking.png",
            "talking": "/assets/characters/astro-talking.png",
        },
    ),
    CharacterTemplate(
        id="char2",
        name="Luna the Robot",
        poses={
            "idle": "/assets/characters/luna-idle.png",
            "happy": "/assets/characters/luna-happy.png",
            "sad": "/assets/characters/luna-sad.png",
        },
    ),
    CharacterTemplate(
        id="rajasthani-man",
        name="Rajasthani Man",
        poses={
            "idle": "/assets/characters/rajasthani-man-idle.png",
            "happy": "/assets/characters/rajasthani-man-happy.png",
            "sad": "/assets/characters/rajasthani-man-sad.png",
        },
    ),
    CharacterTemplate(
        id="rajasthani-woman",
        name="Rajasthani Woman",
        poses={
            "idle": "/assets/characters/rajasthani-woman-idle.png",
            "happy": "/assets/characters/rajasthani-woman-happy.png",
            "romantic": "/assets/characters/rajasthani-woman-romantic.png",
        },
    ),
)

BACKGROUNDS: tuple[Background, ...] = (
    Background(id="bg1", name="Space Station", image="/assets/backgrounds/space-station.jpg"),
    Background(id="bg2", name="Alien Planet", image="/assets/backgrounds/alien-planet.jpg"),
    Background(id="bg3", name="Cyber City", image="/assets/backgrounds/cyber-city.jpg"),
    Background(
        id="bg-rajasthani-village",
        name="Rajasthani Village",
        image="/assets/backgrounds/rajasthani-village.jpg",
    ),
)

SOUND_EFFECTS: tuple[SoundEffect, ...] = (
    SoundEffect(name="Laser Blast", source="/assets/sfx/laser.mp3"),
    SoundEffect(name="Whoosh", source="/assets/sfx/whoosh.mp3"),
    SoundEffect(name="Beep", source="/assets/sfx/beep.mp3"),
)


def find_character(character_id: str) -> Optional[CharacterTemplate]:
    """Busca una plantilla de personaje por id."""
    for template in CHARACTERS:
        if template.id == character_id:
            return template
    return None
