"""Shared fixtures for the snap pipeline tests."""

from concurrent.futures import Future

import numpy as np
import pytest
from PIL import Image

from snapdust.core import SnapConfig, SpriteParser, decompose_sprite


def make_pixels(height: int = 24, width: int = 16, seed: int = 42) -> np.ndarray:
    """Opaque random RGBA with a fully transparent (zeroed) top-left corner."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    pixels[:4, :4] = 0
    return pixels


class ManualExecutor:
    """Executor stand-in that only runs submitted work when told to."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.jobs.append((future, fn, args, kwargs))
        return future

    def run_all(self):
        jobs, self.jobs = self.jobs, []
        for future, fn, args, kwargs in jobs:
            # Mirrors ThreadPoolExecutor: cancelled work never runs
            if future.set_running_or_notify_cancel():
                future.set_result(fn(*args, **kwargs))

    def shutdown(self, wait=True, cancel_futures=False):
        self.jobs = []


@pytest.fixture
def pixels():
    return make_pixels()


@pytest.fixture
def sprite(pixels):
    return SpriteParser.from_array(pixels, name="test")


@pytest.fixture
def layer_set(sprite):
    return decompose_sprite(sprite, bucket_count=4, seed=7)


@pytest.fixture
def sprite_png(tmp_path, pixels):
    path = tmp_path / "card.png"
    Image.fromarray(pixels, "RGBA").save(path)
    return path


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def snapped():
    """Records every on_snapped notification."""
    calls = []

    def on_snapped():
        calls.append(True)

    on_snapped.calls = calls
    return on_snapped


@pytest.fixture
def config(snapped):
    return SnapConfig(on_snapped=snapped, duration_ms=1000, bucket_count=4, seed=3)
