"""Tests de la CLI."""

import json

import pytest
from PIL import Image

from toonlife.main import main


@pytest.fixture
def scene_file(tmp_path, write_png):
    write_png("backgrounds/stage.png", color=(0, 0, 255), size=(160, 90))
    write_png("characters/astro.png", color=(255, 0, 0), size=(20, 40))
    scene = {
        "background": "/backgrounds/stage.png",
        "duration": 4,
        "keyframes": [
            {"characters": [{"id": "c", "instanceId": "astro-1", "poses": {"idle": "/characters/astro.png"},
                             "x": 0, "y": 0, "width": 20, "height": 40}]},
            {"characters": [{"id": "c", "instanceId": "astro-1", "poses": {"idle": "/characters/astro.png"},
                             "x": 100, "y": 0, "width": 20, "height": 40}]},
        ],
        "audioClips": [{"name": "beep", "url": "/sfx/beep.wav", "trackId": "sfx",
                        "start": 1, "duration": 1, "sourceDuration": 1}],
    }
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(scene), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "config.yaml"
    path.write_text(
        f"export_width: 160\nexport_height: 90\nstage_width: 160\nstage_height: 90\n"
        f"assets_root: {tmp_path}\nhw_accel: none\n",
        encoding="utf-8",
    )
    return path


class TestCli:
    def test_inspect(self, scene_file, config_file, capsys):
        assert main(["--config", str(config_file), "inspect", str(scene_file), "--time", "1.5"]) == 0
        out = capsys.readouterr().out
        assert "t = 1.50s" in out
        assert "beep" in out

    def test_frame(self, tmp_path, scene_file, config_file):
        output = tmp_path / "out" / "frame.png"
        code = main(["--config", str(config_file), "frame", str(scene_file), "--time", "0", "-o", str(output)])
        assert code == 0

        with Image.open(output) as img:
            assert img.size == (160, 90)
            assert img.convert("RGB").getpixel((5, 5)) == (255, 0, 0)
            assert img.convert("RGB").getpixel((150, 80)) == (0, 0, 255)

    def test_invalid_scene(self, tmp_path, config_file):
        bad = tmp_path / "bad.json"
        bad.write_text("{roto", encoding="utf-8")
        assert main(["--config", str(config_file), "inspect", str(bad)]) == 1

    def test_missing_scene(self, tmp_path, config_file):
        assert main(["--config", str(config_file), "inspect", str(tmp_path / "nada.json")]) == 1
