"""Tests del modelo de datos."""

import pytest
from pydantic import ValidationError

from toonlife.domain.models import (
    AnimationPreset,
    AudioClip,
    CharacterItem,
    Keyframe,
    PhotoItem,
    Scene,
    TextItem,
    TrackId,
)


class TestAudioClip:
    """Invariantes de ventana de fuente."""

    def test_valid_clip(self, make_clip):
        clip = make_clip()
        assert clip.end == 5.0
        assert clip.playback_rate == 1.0

    def test_window_past_source_is_rejected(self, make_clip):
        with pytest.raises(ValidationError):
            make_clip(offset=3.0, duration=3.0, source_duration=5.0)

    def test_negative_offset_is_rejected(self, make_clip):
        with pytest.raises(ValidationError):
            make_clip(offset=-0.5)

    def test_zero_duration_is_rejected(self, make_clip):
        with pytest.raises(ValidationError):
            make_clip(duration=0)

    def test_pitch_twelve_doubles_rate(self, make_clip):
        assert make_clip(pitch=12).playback_rate == 2.0
        assert make_clip(pitch=-12).playback_rate == 0.5

    def test_camel_case_input(self):
        clip = AudioClip.model_validate({
            "name": "Beep",
            "url": "/assets/sfx/beep.mp3",
            "trackId": "sfx",
            "start": 0,
            "duration": 1.2,
            "sourceDuration": 1.2,
            "offset": 0,
            "characterInstanceId": "abc",
        })
        assert clip.source == "/assets/sfx/beep.mp3"
        assert clip.track is TrackId.SFX
        assert clip.character_instance_id == "abc"

    def test_clips_are_frozen(self, make_clip):
        clip = make_clip()
        with pytest.raises(ValidationError):
            clip.start = 1.0


class TestSceneItems:
    def test_character_defaults_to_first_pose(self):
        character = CharacterItem(asset_id="char2", poses={"idle": "/idle.png", "happy": "/happy.png"})
        assert character.pose == "idle"
        assert character.pose_names == ("idle", "happy")
        assert character.pose_image("happy") == "/happy.png"
        assert character.pose_image("sad") is None
        assert character.selected_image == "/idle.png"

    def test_character_pose_may_be_an_image(self):
        character = CharacterItem(asset_id="c", poses={"idle": "/idle.png"}, pose="/idle.png")
        assert character.selected_image == "/idle.png"

    def test_photo_accepts_url_alias(self):
        photo = PhotoItem.model_validate({"id": "p1", "name": "foto", "url": "/photo.png"})
        assert photo.asset_id == "p1"
        assert photo.image == "/photo.png"

    def test_instance_ids_are_unique(self):
        a = TextItem(asset_id="t", text="a")
        b = TextItem(asset_id="t", text="b")
        assert a.instance_id != b.instance_id

    def test_preset_from_mapping(self):
        preset = AnimationPreset.model_validate({
            "name": "slide",
            "keyframes": {"x": {"from": 0, "to": 100}},
            "duration": 1,
        })
        assert preset.tracks[0].target == "x"
        assert preset.tracks[0].to_value == 100


class TestScene:
    def test_create_has_one_keyframe(self):
        scene = Scene.create()
        assert len(scene.keyframes) == 1
        assert scene.duration == 10.0

    def test_empty_keyframes_rejected(self):
        with pytest.raises(ValidationError):
            Scene(keyframes=())

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValidationError):
            Scene(duration=0)

    def test_keyframe_times(self):
        scene = Scene(keyframes=(Keyframe(), Keyframe(), Keyframe()), duration=10.0)
        assert [scene.keyframe_time(i) for i in range(3)] == [0.0, 5.0, 10.0]
        assert Scene.create().keyframe_time(0) == 0.0

    def test_keyframe_items_and_z(self, astro):
        text = TextItem(asset_id="t", text="hola", z_index=3)
        keyframe = Keyframe(characters=(astro,), text_items=(text,))
        assert keyframe.items() == (astro, text)
        assert keyframe.find(text.instance_id) == text
        assert keyframe.max_z_index() == 3
        assert Keyframe().max_z_index() == -1

    def test_all_instance_ids(self, two_keyframe_scene):
        assert two_keyframe_scene.all_instance_ids() == {"astro-1"}
