"""Tests for PNG encoding of layers and animation export."""

import json

import numpy as np
from PIL import Image

from snapdust.core import SpriteExporter, SpriteParser, decompose_sprite


def test_png_encoding_is_lossless(pixels):
    data = SpriteExporter.encode_png(pixels)
    assert data[:8] == b"\x89PNG\r\n\x1a\n"
    np.testing.assert_array_equal(SpriteParser.from_bytes(data).pixels, pixels)


def test_encode_layers_one_per_layer(layer_set):
    encoded = SpriteExporter.encode_layers(layer_set)
    assert len(encoded) == len(layer_set)
    np.testing.assert_array_equal(SpriteParser.from_bytes(encoded[1]).pixels, layer_set[1].pixels)


def test_zero_area_layers_encode_empty():
    sprite = SpriteParser.from_array(np.zeros((0, 4, 4), dtype=np.uint8))
    layer_set = decompose_sprite(sprite, bucket_count=2, seed=0)
    assert SpriteExporter.encode_layers(layer_set) == [b"", b""]


def test_export_layers(tmp_path, layer_set):
    paths = SpriteExporter.export_layers(layer_set, tmp_path / "layers")

    assert [p.name for p in paths] == ["layer_00.png", "layer_01.png", "layer_02.png", "layer_03.png"]
    with Image.open(paths[2]) as img:
        np.testing.assert_array_equal(np.array(img.convert("RGBA")), layer_set[2].pixels)


def test_export_layers_reuses_encoded_bytes(tmp_path, layer_set):
    encoded = layer_set.with_encoded(SpriteExporter.encode_layers(layer_set))
    paths = SpriteExporter.export_layers(encoded, tmp_path)
    assert paths[0].read_bytes() == encoded[0].encoded


def test_to_gif(tmp_path, pixels):
    frames = [pixels, np.zeros_like(pixels), pixels]
    path = SpriteExporter.to_gif(frames, tmp_path / "snap.gif", duration=50)

    with Image.open(path) as img:
        assert img.n_frames == 3
        assert img.size == (16, 24)


def test_to_spritesheet(tmp_path, pixels):
    frames = [pixels] * 5
    path, meta = SpriteExporter.to_spritesheet(frames, tmp_path / "sheet.png", columns=2)

    assert meta["rows"] == 3
    with Image.open(path) as img:
        assert img.size == (32, 72)
    assert json.loads(path.with_suffix(".json").read_text())["frames"] == 5


def test_to_frames(tmp_path, pixels):
    paths = SpriteExporter.to_frames([pixels, pixels], tmp_path / "frames")
    assert [p.name for p in paths] == ["frame_0000.png", "frame_0001.png"]
