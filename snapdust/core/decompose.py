"""
Sprite Decomposition - Scatter a sprite's pixels into dust layers

Every pixel of the captured sprite is copied into exactly one of N sparse
layers. The layer is drawn at random per pixel, weighted by a discretized
Gaussian over the bucket index centred on the pixel's row position: rows near
the top mostly land in the first layers, rows near the bottom in the last
ones, with some mixing in between. Layers later drift and fade one after the
other, so the sprite appears to crumble from top to bottom.
"""

import logging
import time

import numpy as np
from typing import List, Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field, replace

from .errors import SnapConfigError
from .parser import Sprite
from .utils import MathUtils

logger = logging.getLogger(__name__)

# Spread of the bucket distribution; lower = banded layers, higher = mixed
GAUSS_SPREAD = 0.14
WEIGHT_SCALE = 1000


@dataclass(frozen=True)
class DustLayer:
    """One of the N sparse layers produced by decomposition"""

    index: int
    pixels: np.ndarray          # (H, W, 4) RGBA, transparent where not owned
    mask: np.ndarray            # (H, W) bool, positions owned by this layer
    dislocation: float = 0.0    # random factor in [-1, 1]
    encoded: Optional[bytes] = None  # PNG of pixels, filled by the worker

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def pixel_count(self) -> int:
        return int(np.count_nonzero(self.mask))


@dataclass(frozen=True)
class LayerSet:
    """Ordered, immutable collection of dust layers for one snap cycle"""

    width: int
    height: int
    layers: Tuple[DustLayer, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.layers)

    def __iter__(self):
        return iter(self.layers)

    def __getitem__(self, index: int) -> DustLayer:
        return self.layers[index]

    @property
    def bucket_count(self) -> int:
        return len(self.layers)

    @property
    def randoms(self) -> List[float]:
        """Per-layer dislocation factors in layer order"""
        return [layer.dislocation for layer in self.layers]

    @property
    def is_empty(self) -> bool:
        """True when the source had no pixels (zero-area capture)"""
        return self.width == 0 or self.height == 0

    @property
    def is_encoded(self) -> bool:
        return all(layer.encoded is not None for layer in self.layers)

    def composite(self) -> np.ndarray:
        """Overlay all layers; reproduces the source sprite exactly"""
        result = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        for layer in self.layers:
            result[layer.mask] = layer.pixels[layer.mask]
        return result

    def with_encoded(self, encoded: Sequence[bytes]) -> 'LayerSet':
        """Return a copy whose layers carry their encoded images"""
        if len(encoded) != len(self.layers):
            raise ValueError(
                f"Got {len(encoded)} encoded images for {len(self.layers)} layers"
            )
        return LayerSet(
            width=self.width,
            height=self.height,
            layers=tuple(replace(layer, encoded=data) for layer, data in zip(self.layers, encoded))
        )


# =============================================================================
# Weights & Bucket Sampling
# =============================================================================

def gauss_weight(center: float, value: float) -> int:
    """Discretized Gaussian weight of a bucket at `value` for a row at `center`"""
    return MathUtils.round_half_up(
        WEIGHT_SCALE * np.exp(-((value - center) ** 2) / GAUSS_SPREAD)
    )


def bucket_weights(y: int, height: int, bucket_count: int) -> np.ndarray:
    """
    Weights of every bucket for pixel row y.

    w(y, b) = round(1000 * exp(-(b/N - y/height)^2 / 0.14))
    """
    center = y / height
    positions = np.arange(bucket_count, dtype=np.float64) / bucket_count
    raw = WEIGHT_SCALE * np.exp(-((positions - center) ** 2) / GAUSS_SPREAD)
    return np.floor(raw + 0.5).astype(np.int64)


def pick_bucket(
    weights: Sequence[int],
    sum_of_weights: int,
    rng: np.random.Generator
) -> int:
    """
    Returns index of a randomly chosen bucket.

    A uniform integer in [0, sum_of_weights) is walked through the buckets by
    cumulative subtraction; the first bucket it falls into wins. With no weight
    at all the first bucket is returned without drawing. If rounding leaves the
    walk unresolved the last bucket is used.
    """
    if len(weights) == 0:
        raise SnapConfigError("Cannot pick a bucket from an empty weight list")
    if sum_of_weights <= 0:
        return 0

    rnd = int(rng.integers(0, sum_of_weights))
    for i, weight in enumerate(weights):
        if rnd < weight:
            return i
        rnd -= weight
    return len(weights) - 1


def _pick_row(weights: np.ndarray, sum_of_weights: int, width: int,
              rng: np.random.Generator) -> np.ndarray:
    """Vectorized pick_bucket for a whole row of pixels"""
    if sum_of_weights <= 0:
        return np.zeros(width, dtype=np.int64)
    draws = rng.integers(0, sum_of_weights, size=width)
    # First bucket whose running total exceeds the draw
    chosen = np.searchsorted(np.cumsum(weights), draws, side='right')
    return np.minimum(chosen, len(weights) - 1)


def validate_bucket_count(bucket_count) -> int:
    if isinstance(bucket_count, bool) or not isinstance(bucket_count, (int, np.integer)):
        raise SnapConfigError(f"bucket_count must be an integer, got {bucket_count!r}")
    if bucket_count < 1:
        raise SnapConfigError(f"bucket_count must be at least 1, got {bucket_count}")
    return int(bucket_count)


# =============================================================================
# Decomposer
# =============================================================================

class SnapDecomposer:
    """
    Splits a sprite into N dust layers.

    Methods:
        decompose(): Full decomposition into a LayerSet
        assign(): Bucket index of every pixel (no copying)
    """

    def __init__(
        self,
        bucket_count: int = 16,
        rng: Optional[Union[np.random.Generator, int]] = None
    ):
        self.bucket_count = validate_bucket_count(bucket_count)
        if isinstance(rng, np.random.Generator):
            self.rng = rng
        else:
            self.rng = np.random.default_rng(rng)

    def assign(self, height: int, width: int) -> np.ndarray:
        """Choose a bucket for every pixel position, row by row"""
        assignment = np.zeros((height, width), dtype=np.int64)
        for y in range(height):
            weights = bucket_weights(y, height, self.bucket_count)
            assignment[y] = _pick_row(weights, int(weights.sum()), width, self.rng)
        return assignment

    def decompose(self, sprite: Sprite) -> LayerSet:
        """
        Decompose a sprite into dust layers.

        Args:
            sprite: Captured sprite (not modified)

        Returns:
            LayerSet with bucket_count layers and their dislocation factors
        """
        started = time.perf_counter()
        h, w = sprite.height, sprite.width
        source = np.asarray(sprite.pixels, dtype=np.uint8)

        assignment = self.assign(h, w)

        layers = []
        for index in range(self.bucket_count):
            mask = assignment == index
            pixels = np.zeros((h, w, 4), dtype=np.uint8)
            pixels[mask] = source[mask]
            pixels.setflags(write=False)
            mask.setflags(write=False)
            layers.append((index, pixels, mask))

        # Values from -1 to 1 to dislocate the layers a bit
        randoms = (self.rng.random(self.bucket_count) - 0.5) * 2

        layer_set = LayerSet(
            width=w,
            height=h,
            layers=tuple(
                DustLayer(index=index, pixels=pixels, mask=mask, dislocation=float(randoms[index]))
                for index, pixels, mask in layers
            )
        )

        logger.debug(
            "Decomposed %s (%dx%d) into %d layers in %.1f ms",
            sprite.name, w, h, self.bucket_count, (time.perf_counter() - started) * 1000
        )
        return layer_set


def decompose_sprite(sprite: Sprite, bucket_count: int = 16, seed: Optional[int] = None) -> LayerSet:
    """Quick decomposition with a fresh (optionally seeded) generator"""
    return SnapDecomposer(bucket_count, seed).decompose(sprite)
