"""
Snappable - Makes a subject crumble into dust

Flow of one snap cycle:

    snap()  -> capture the subject (caller's thread)
            -> decompose + encode layers (background worker)
    tick()  -> pick up the finished layers, wait the grace delay,
               then run the layer animator until it completes
    reset() -> back to the intact subject; late worker results are dropped

Example:
    config = SnapConfig(on_snapped=lambda: print("Snapped!"))
    with Snappable(config, SpriteParser.capture_file("card.png")) as effect:
        effect.snap()
        while not effect.is_gone:
            effect.tick(16)
            frame = effect.render_frame()
"""

import logging
import time

import numpy as np
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .animator import AnimationStatus, LayerAnimator, LayerState
from .compositor import canvas_margin, render_frame, Margin
from .config import SnapConfig
from .decompose import LayerSet, SnapDecomposer
from .exporter import SpriteExporter
from .parser import Capture, Sprite, SpriteParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapJob:
    """Result of the background step, tagged with the cycle that asked for it"""
    generation: int
    layer_set: LayerSet


def build_layers(
    generation: int,
    sprite: Sprite,
    bucket_count: int,
    rng: np.random.Generator
) -> SnapJob:
    """Decompose a sprite and encode its layers. Slow: runs on the worker."""
    started = time.perf_counter()
    layer_set = SnapDecomposer(bucket_count, rng).decompose(sprite)
    layer_set = layer_set.with_encoded(SpriteExporter.encode_layers(layer_set))
    logger.debug("Snap job %d ready in %.1f ms", generation, (time.perf_counter() - started) * 1000)
    return SnapJob(generation=generation, layer_set=layer_set)


class Snappable:
    """
    Snap effect controller for one subject.

    The host owns the frame loop: it calls tick() once per frame and draws
    render_states() (or render_frame()). Nothing here blocks the caller
    except the capture itself.
    """

    def __init__(
        self,
        config: SnapConfig,
        capture: Capture,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        self.config = config
        self.capture = capture
        self.animator = LayerAnimator(
            duration_ms=config.duration_ms,
            offset=config.offset,
            random_dislocation=config.random_dislocation,
            on_complete=config.on_snapped,
            curve=config.curve
        )

        self._seeds = np.random.SeedSequence(config.seed)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="snapdust")

        self._generation = 0
        self._pending: Optional[Future] = None
        self._staged: Optional[LayerSet] = None
        self._grace_remaining = 0.0
        self._sprite: Optional[Sprite] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def status(self) -> AnimationStatus:
        return self.animator.status

    @property
    def is_gone(self) -> bool:
        """True once the snap animation has completed"""
        return self.animator.is_completed

    @property
    def is_busy(self) -> bool:
        """A cycle is in flight (preparing, waiting out the grace delay, or animating)"""
        return self._pending is not None or self._staged is not None or not self.animator.is_idle

    @property
    def is_preparing(self) -> bool:
        return self._pending is not None or self._staged is not None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def sprite(self) -> Optional[Sprite]:
        """Last captured subject"""
        return self._sprite

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        """Size of the last captured subject"""
        return self._sprite.size if self._sprite is not None else None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def snap(self) -> Optional[Future]:
        """
        I am... inevitable.

        Captures the subject and hands decomposition to the worker.
        Returns the worker future, or None when a cycle is already in flight.

        Raises:
            CaptureNotReadyError: the subject could not be captured; nothing changed
        """
        if self.is_busy:
            logger.info("Snap ignored: effect is already %s",
                        "preparing" if self.is_preparing else self.status.value)
            return None

        sprite = SpriteParser.capture(self.capture)
        self._sprite = sprite

        self._generation += 1
        rng = np.random.default_rng(self._seeds.spawn(1)[0])
        logger.info("Snapping %s (%dx%d) into %d layers",
                    sprite.name, sprite.width, sprite.height, self.config.bucket_count)

        self._pending = self._executor.submit(
            build_layers, self._generation, sprite, self.config.bucket_count, rng
        )
        return self._pending

    def reset(self) -> None:
        """Bring the subject back. Safe at any point, including mid-preparation."""
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._staged = None
        self._grace_remaining = 0.0
        self.animator.reset()

    def tap(self) -> Optional[Future]:
        """Tap-to-toggle: reset when gone, otherwise snap (only with snap_on_tap)"""
        if not self.config.snap_on_tap:
            return None
        if self.is_gone:
            self.reset()
            return None
        return self.snap()

    def tick(self, dt_ms: float) -> float:
        """
        Advance one host frame.

        Returns:
            Global animation progress (0 until the animation has started)
        """
        if dt_ms < 0:
            raise ValueError(f"dt_ms must be non-negative, got {dt_ms}")

        if self._poll():
            # The grace delay counts from the next frame
            return self.animator.value

        if self._staged is not None:
            self._grace_remaining -= dt_ms
            if self._grace_remaining <= 0:
                layer_set, self._staged = self._staged, None
                self.animator.start(layer_set)
            return self.animator.value

        return self.animator.advance(dt_ms)

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the pending worker job finishes (offline rendering, tests).

        Returns:
            True when layers are staged or already animating
        """
        if self._pending is not None:
            self._pending.result(timeout)
            self._poll()
        return self._staged is not None or not self.animator.is_idle

    def _poll(self) -> bool:
        """Pick up a finished job; True when it was accepted just now"""
        if self._pending is None or not self._pending.done():
            return False

        future, self._pending = self._pending, None
        if future.cancelled():
            return False
        return self._accept(future.result())

    def _accept(self, job: SnapJob) -> bool:
        """Stage a finished job unless it belongs to an older cycle"""
        if job.generation != self._generation:
            logger.debug("Discarding stale snap job %d (current cycle %d)",
                         job.generation, self._generation)
            return False
        if not self.animator.is_idle or self._staged is not None:
            logger.debug("Discarding snap job %d: effect already busy", job.generation)
            return False

        self._staged = job.layer_set
        self._grace_remaining = float(self.config.grace_ms)
        if self._grace_remaining <= 0:
            self._staged = None
            self.animator.start(job.layer_set)
        return True

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_states(self) -> List[LayerState]:
        """Per-layer (image, translation, opacity); empty means draw the original"""
        return self.animator.layer_states()

    @property
    def margin(self) -> Margin:
        return canvas_margin(self.config.max_reach)

    def render_frame(
        self,
        margin: Optional[Margin] = None,
        background: Optional[Tuple[int, int, int, int]] = None
    ) -> np.ndarray:
        """Composite the current frame to an RGBA array"""
        if self._sprite is None:
            self._sprite = SpriteParser.capture(self.capture)
        sprite = self._sprite
        return render_frame(
            sprite.width,
            sprite.height,
            self.render_states(),
            original=sprite.pixels,
            margin=self.margin if margin is None else margin,
            background=background
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.reset()
        if self._owns_executor:
            self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> 'Snappable':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
