"""Tests del motor de interpolación."""

import pytest

from toonlife.domain.models import CharacterItem, Keyframe, PhotoItem, Scene, TextItem, TrackId
from toonlife.timeline.audio import audible_clips_at
from toonlife.timeline.interpolation import bracketing_keyframes, lerp, resolve_frame


def _item(frame, instance_id):
    return next(item for item in frame.items if item.instance_id == instance_id)


class TestBracketing:
    def test_single_keyframe(self):
        assert bracketing_keyframes(Scene.create(), 7.0) == (0, 0, 0.0)

    def test_between_keyframes(self):
        scene = Scene(keyframes=(Keyframe(), Keyframe(), Keyframe()), duration=10.0)
        assert bracketing_keyframes(scene, 7.5) == (1, 2, 0.5)

    def test_clamped(self):
        scene = Scene(keyframes=(Keyframe(), Keyframe(), Keyframe()), duration=10.0)
        assert bracketing_keyframes(scene, -1.0) == (0, 0, 0.0)
        assert bracketing_keyframes(scene, 10.0) == (2, 2, 0.0)
        assert bracketing_keyframes(scene, 42.0) == (2, 2, 0.0)

    def test_lerp(self):
        assert lerp(0, 100, 0.25) == 25


class TestResolveFrame:
    """Interpolación de propiedades continuas y discretas."""

    def test_midpoint(self, two_keyframe_scene):
        character = _item(resolve_frame(two_keyframe_scene, 5.0), "astro-1")
        assert character.x == 50
        assert character.width == 150
        assert character.rotation == 45

    def test_discrete_fields_come_from_source(self, two_keyframe_scene):
        character = _item(resolve_frame(two_keyframe_scene, 9.9), "astro-1")
        assert character.flip_h is False
        assert character.image == "/characters/astro-idle.png"

    @pytest.mark.parametrize("time,expected_x", [(-3.0, 0.0), (0.0, 0.0), (10.0, 100.0), (25.0, 100.0)])
    def test_clamping(self, two_keyframe_scene, time, expected_x):
        assert _item(resolve_frame(two_keyframe_scene, time), "astro-1").x == expected_x

    def test_last_keyframe_discrete_state(self, two_keyframe_scene):
        assert _item(resolve_frame(two_keyframe_scene, 10.0), "astro-1").flip_h is True

    def test_unmatched_items_hold_source_state(self, astro):
        ghost = TextItem(asset_id="t", instance_id="ghost", text="solo", x=10)
        newcomer = TextItem(asset_id="t", instance_id="new", text="nuevo", x=99)
        scene = Scene(
            keyframes=(
                Keyframe(characters=(astro,), text_items=(ghost,)),
                Keyframe(characters=(astro,), text_items=(newcomer,)),
            ),
            duration=10.0,
        )
        frame = resolve_frame(scene, 5.0)
        assert _item(frame, "ghost").x == 10
        assert all(item.instance_id != "new" for item in frame.items)

    def test_text_font_size_interpolates(self):
        a = TextItem(asset_id="t", instance_id="t1", text="hola", font_size=20, color="#FF0000")
        b = a.model_copy(update={"font_size": 40.0, "color": "#00FF00"})
        scene = Scene(keyframes=(Keyframe(text_items=(a,)), Keyframe(text_items=(b,))), duration=2.0)

        text = _item(resolve_frame(scene, 1.0), "t1")
        assert text.font_size == 30
        assert text.color == "#FF0000"
        assert text.text == "hola"

    def test_draw_order(self, astro):
        text = TextItem(asset_id="t", instance_id="text", z_index=0)
        photo = PhotoItem(asset_id="p", instance_id="photo", image="/p.png", z_index=0)
        top = PhotoItem(asset_id="p", instance_id="top", image="/p.png", z_index=-1)
        scene = Scene(keyframes=(Keyframe(characters=(astro,), text_items=(text,), photos=(photo, top)),))

        order = [item.instance_id for item in resolve_frame(scene, 0.0).items]
        assert order == ["top", "astro-1", "photo", "text"]

    def test_background(self, two_keyframe_scene):
        assert resolve_frame(two_keyframe_scene, 3.0).background == "/backgrounds/stage.png"


class TestLipSync:
    """Pose "talking" en vista previa."""

    def _scene(self, astro, make_clip, track=TrackId.VOICEOVER):
        clip = make_clip(track=track, start=1.0, duration=2.0, character_instance_id="astro-1")
        return Scene(keyframes=(Keyframe(characters=(astro,)),), audio_clips=(clip,))

    def test_talking_pose_while_voiceover_audible(self, astro, make_clip):
        scene = self._scene(astro, make_clip)
        audible = audible_clips_at(scene.audio_clips, 2.0)
        frame = resolve_frame(scene, 2.0, audible=audible)
        assert _item(frame, "astro-1").image == "/characters/astro-talking.png"

    def test_no_audible_set_means_no_lip_sync(self, astro, make_clip):
        scene = self._scene(astro, make_clip)
        assert _item(resolve_frame(scene, 2.0), "astro-1").image == "/characters/astro-idle.png"

    def test_music_does_not_trigger(self, astro, make_clip):
        scene = self._scene(astro, make_clip, track=TrackId.MUSIC)
        audible = audible_clips_at(scene.audio_clips, 2.0)
        assert _item(resolve_frame(scene, 2.0, audible=audible), "astro-1").image == "/characters/astro-idle.png"

    def test_character_without_talking_pose(self, make_clip):
        luna = CharacterItem(asset_id="char2", instance_id="astro-1", poses={"idle": "/luna.png"})
        scene = Scene(
            keyframes=(Keyframe(characters=(luna,)),),
            audio_clips=(make_clip(track=TrackId.VOICEOVER, character_instance_id="astro-1"),),
        )
        audible = audible_clips_at(scene.audio_clips, 2.5)
        assert _item(resolve_frame(scene, 2.5, audible=audible), "astro-1").image == "/luna.png"
