"""Tests del reloj de reproducción y la sincronización en vivo."""

import asyncio

import pytest

from toonlife.config import EngineConfig
from toonlife.domain.models import Keyframe, Scene, TrackId
from toonlife.errors import AssetUnavailable
from toonlife.playback import LiveSync, PlaybackClock, PreviewSession


class FakeTime:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class RecordingOutput:
    """Salida de audio que solo registra las llamadas."""

    def __init__(self):
        self.started = []
        self.stopped = []

    def start(self, clip, source_offset, rate):
        self.started.append((clip.id, source_offset, rate))

    def stop(self, clip_id):
        self.stopped.append(clip_id)


class TestPlaybackClock:
    def test_advance_and_wrap(self):
        clock = PlaybackClock(1.0)
        clock.play()
        for _ in range(3):
            clock.advance(0.25)
        assert clock.is_playing
        assert clock.current_time == 0.75

        clock.advance(0.25)
        assert clock.current_time == 0.0
        assert not clock.is_playing

    def test_advance_while_paused(self):
        clock = PlaybackClock(5.0)
        assert clock.advance(1.0) == 0.0

    def test_scrub_clamps_and_keeps_state(self):
        clock = PlaybackClock(10.0)
        assert clock.scrub(-2.0) == 0.0
        assert clock.scrub(12.0) == 10.0
        assert not clock.is_playing

        clock.play()
        clock.scrub(4.0)
        assert clock.is_playing
        assert clock.current_time == 4.0

    def test_stop_and_toggle(self):
        clock = PlaybackClock(10.0)
        clock.toggle()
        clock.advance(3.0)
        clock.toggle()
        assert not clock.is_playing
        assert clock.current_time == 3.0
        clock.stop()
        assert clock.current_time == 0.0

    def test_update_uses_time_source(self):
        fake = FakeTime()
        clock = PlaybackClock(10.0, time_source=fake)
        clock.play()
        fake.now = 1.5
        assert clock.update() == 1.5
        fake.now = 2.0
        assert clock.update() == 2.0

    def test_set_duration_clamps(self):
        clock = PlaybackClock(10.0)
        clock.scrub(8.0)
        clock.set_duration(5.0)
        assert clock.current_time == 5.0
        with pytest.raises(ValueError):
            clock.set_duration(0)


class TestLiveSync:
    """Diferencias entre el conjunto activo y el audible."""

    def test_starts_once(self, make_clip):
        output = RecordingOutput()
        sync = LiveSync(output)
        clips = [make_clip(id="a", start=1.0, offset=0.5, pitch=12)]

        sync.sync(clips, 2.0)
        sync.sync(clips, 2.0)
        sync.sync(clips, 2.05)
        assert output.started == [("a", 1.5, 2.0)]
        assert sync.active_ids == {"a"}

    def test_stops_when_leaving(self, make_clip):
        output = RecordingOutput()
        sync = LiveSync(output)
        clips = [make_clip(id="a", start=1.0, duration=1.0)]

        sync.sync(clips, 1.5)
        sync.sync(clips, 2.0)
        assert output.stopped == ["a"]
        assert sync.active_ids == set()

    def test_edited_clip_restarts(self, make_clip):
        output = RecordingOutput()
        sync = LiveSync(output)
        clip = make_clip(id="a", start=0.0)

        sync.sync([clip], 1.0)
        sync.sync([clip.model_copy(update={"pitch": 3.0})], 1.05)
        assert output.stopped == ["a"]
        assert len(output.started) == 2

    def test_resync_tears_down_first(self, make_clip):
        output = RecordingOutput()
        sync = LiveSync(output)
        clips = [make_clip(id="a", start=0.0)]

        sync.sync(clips, 1.0)
        sync.resync(clips, 2.5)
        assert output.stopped == ["a"]
        assert output.started[-1] == ("a", 2.5, 1.0)

    def test_missing_audio_is_skipped(self, make_clip):
        class BrokenOutput(RecordingOutput):
            def start(self, clip, source_offset, rate):
                raise AssetUnavailable(clip.source)

        sync = LiveSync(BrokenOutput())
        clips = [make_clip(id="a", start=0.0)]
        assert len(sync.sync(clips, 1.0)) == 1
        assert sync.active_ids == {"a"}


class TestPreviewSession:
    @pytest.fixture
    def scene(self, astro, make_clip) -> Scene:
        voice = make_clip(
            id="voice",
            track=TrackId.VOICEOVER,
            start=0.0,
            duration=5.0,
            source_duration=5.0,
            character_instance_id="astro-1",
        )
        return Scene(keyframes=(Keyframe(characters=(astro,)),), audio_clips=(voice,), duration=10.0)

    def test_play_tick_and_lip_sync(self, scene):
        fake = FakeTime()
        output = RecordingOutput()
        session = PreviewSession(scene, output, time_source=fake)

        session.play()
        fake.now = 1.0
        preview = session.tick()

        assert preview.time == 1.0
        assert output.started == [("voice", 0.0, 1.0)]
        assert preview.frame.items[0].image == "/characters/astro-talking.png"

    def test_paused_frame_has_no_lip_sync(self, scene):
        session = PreviewSession(scene, RecordingOutput(), time_source=FakeTime())
        session.scrub(1.0)
        preview = session.tick()
        assert preview.frame.items[0].image == "/characters/astro-idle.png"
        assert len(preview.audible) == 1

    def test_end_of_scene_stops_audio(self, scene):
        fake = FakeTime()
        output = RecordingOutput()
        session = PreviewSession(scene, output, time_source=fake)

        session.play()
        fake.now = 11.0
        preview = session.tick()
        assert preview.time == 0.0
        assert not session.clock.is_playing
        assert output.stopped == ["voice"]

    def test_scrub_while_playing_resyncs(self, scene):
        fake = FakeTime()
        output = RecordingOutput()
        session = PreviewSession(scene, output, time_source=fake)

        session.play()
        session.scrub(3.0)
        assert output.stopped == ["voice"]
        assert output.started[-1] == ("voice", 3.0, 1.0)

    def test_enter_export_tears_down(self, scene):
        output = RecordingOutput()
        session = PreviewSession(scene, output, time_source=FakeTime())
        session.play()
        session.enter_export()
        assert not session.clock.is_playing
        assert output.stopped == ["voice"]

    def test_set_scene_restarts_edited_clip(self, scene):
        output = RecordingOutput()
        session = PreviewSession(scene, output, time_source=FakeTime())
        session.play()

        edited = scene.model_copy(update={"audio_clips": (scene.audio_clips[0].model_copy(update={"pitch": 2.0}),)})
        session.set_scene(edited)
        assert output.stopped == ["voice"]
        assert len(output.started) == 2
        assert session.scene is edited

    def test_run_loop(self, scene):
        session = PreviewSession(scene, RecordingOutput(), EngineConfig(preview_tick=0.001))
        frames = []
        asyncio.run(session.run(frames.append, until=lambda preview: len(frames) >= 3))
        assert len(frames) == 3
