"""End-to-end tests for snap() and the command line."""

import numpy as np
import pytest
from PIL import Image

from snapdust import render_snap, snap
from snapdust.core import SnapConfig, SnapConfigError, Snappable, SpriteParser
from snapdust.main import main


class TestRenderSnap:
    def test_frames_go_from_intact_to_gone(self, pixels, snapped):
        config = SnapConfig(on_snapped=snapped, duration_ms=200, bucket_count=3, seed=1)
        with Snappable(config, SpriteParser.capture_array(pixels)) as effect:
            frames = render_snap(effect, fps=20, timeout=10)
            left, top, _, _ = effect.margin

        np.testing.assert_array_equal(frames[0][top:top + 24, left:left + 16], pixels)
        assert frames[-1][..., 3].max() == 0
        assert len(snapped.calls) == 1

    def test_rejects_bad_fps(self, config, pixels):
        with Snappable(config, SpriteParser.capture_array(pixels)) as effect:
            with pytest.raises(SnapConfigError):
                render_snap(effect, fps=0)


class TestSnapFunction:
    def test_default_output_is_gif_next_to_input(self, sprite_png):
        output = snap(sprite_png, duration_ms=200, fps=20, seed=1, bucket_count=3)
        assert output == sprite_png.parent / "card_snap.gif"
        with Image.open(output) as img:
            assert img.n_frames > 2

    def test_layers_format(self, tmp_path, sprite_png):
        paths = snap(sprite_png, tmp_path / "layers", format="layers",
                     duration_ms=100, fps=50, bucket_count=5, seed=2)
        assert len(paths) == 5

    def test_zero_fps_rejected(self, sprite_png):
        with pytest.raises(SnapConfigError):
            snap(sprite_png, fps=0, duration_ms=100)

    def test_unknown_format(self, sprite_png):
        with pytest.raises(ValueError):
            snap(sprite_png, format="mp4")

    def test_unknown_preset(self, sprite_png):
        with pytest.raises(SnapConfigError):
            snap(sprite_png, preset="nope")


class TestMain:
    def test_list_presets(self, capsys):
        assert main(["--list-presets"]) == 0
        assert "thanos" in capsys.readouterr().out

    def test_preset_info(self, capsys):
        assert main(["--preset-info", "shatter"]) == 0
        assert "Layers: 6" in capsys.readouterr().out

    def test_unknown_preset_info(self):
        assert main(["--preset-info", "nope"]) == 1

    def test_requires_input(self, capsys):
        assert main([]) == 1
        assert "Input file is required" in capsys.readouterr().out

    def test_missing_input(self, tmp_path):
        assert main([str(tmp_path / "missing.png")]) == 1

    def test_bad_vector_argument(self, sprite_png):
        with pytest.raises(SystemExit):
            main([str(sprite_png), "--offset", "12"])

    def test_spritesheet_run(self, tmp_path, sprite_png, capsys):
        output = tmp_path / "sheet.png"
        code = main([
            str(sprite_png), "-o", str(output), "--format", "spritesheet",
            "--duration", "200", "--fps", "20", "--buckets", "3", "--seed", "1",
            "--offset", "0,-8", "--dislocation", "2,2", "--easing", "linear",
        ])

        assert code == 0
        assert output.exists()
        assert output.with_suffix(".json").exists()
        out = capsys.readouterr().out
        assert "Snapped!" in out
        assert "Done!" in out

    def test_invalid_bucket_count_reported(self, tmp_path, sprite_png, capsys):
        assert main([str(sprite_png), "-o", str(tmp_path / "x.gif"), "--buckets", "0"]) == 1
        assert "Error:" in capsys.readouterr().out
