"""
Layer Animator - Drives the dust layers over one shared clock

Timeline breakdown (N layers, W = 0.6):

    layer 0     |======== W ========|
    layer 1       |======== W ========|
    ...
    layer N-1           |======== W ========|
    0          start_i = (i/N) * (1 - W)             1

Each layer owns the window [start_i, start_i + W) of the global progress t.
Inside its window the local progress is eased once and drives both the fade
(cos(p * pi/2)) and the drift (zero -> offset + dislocation * r_i).

Example:
    animator = LayerAnimator(duration_ms=5000, offset=Vec2(64, -32),
                             random_dislocation=Vec2(64, 32),
                             on_complete=lambda: print("Snapped!"))
    animator.start(layer_set)
    while animator.is_running:
        animator.advance(16)
        for state in animator.layer_states():
            draw(state.image, state.translation, state.opacity)
"""

import logging
import math

import numpy as np
from typing import Callable, List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum

from .decompose import LayerSet
from .easing import ease_out
from .errors import AnimationInProgressError, SnapConfigError
from .utils import MathUtils, Vec2, ZERO

logger = logging.getLogger(__name__)

SINGLE_LAYER_ANIMATION_LENGTH = 0.6
LAST_LAYER_ANIMATION_START = 1 - SINGLE_LAYER_ANIMATION_LENGTH


class AnimationStatus(Enum):
    """Lifecycle of one snap cycle"""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


# =============================================================================
# Clock
# =============================================================================

class AnimationClock:
    """Single progress value advanced over a fixed duration"""

    def __init__(self, duration_ms: float):
        if duration_ms <= 0:
            raise SnapConfigError(f"duration_ms must be positive, got {duration_ms}")
        self.duration_ms = float(duration_ms)
        self.elapsed_ms = 0.0

    @property
    def value(self) -> float:
        return min(self.elapsed_ms / self.duration_ms, 1.0)

    @property
    def is_finished(self) -> bool:
        return self.elapsed_ms >= self.duration_ms

    def advance(self, dt_ms: float) -> float:
        if dt_ms < 0:
            raise ValueError(f"Clock cannot run backwards (dt_ms={dt_ms})")
        self.elapsed_ms = min(self.elapsed_ms + dt_ms, self.duration_ms)
        return self.value

    def seek(self, t: float) -> float:
        """Jump forward to progress t; earlier values are ignored"""
        target = MathUtils.clamp(t) * self.duration_ms
        self.elapsed_ms = max(self.elapsed_ms, target)
        return self.value

    def reset(self) -> None:
        self.elapsed_ms = 0.0


# =============================================================================
# Per-layer curves
# =============================================================================

def layer_interval(index: int, count: int) -> Tuple[float, float]:
    """Window [start, end) of the global timeline owned by a layer"""
    start = (index / count) * LAST_LAYER_ANIMATION_START
    return start, start + SINGLE_LAYER_ANIMATION_LENGTH


def layer_progress(
    t: float,
    start: float,
    end: float,
    curve: Callable[[float], float] = ease_out
) -> float:
    """Eased local progress of a layer at global progress t"""
    local = MathUtils.clamp((t - start) / (end - start))
    return curve(local)


def layer_opacity(progress: float) -> float:
    """Opaque at 0, gone at 1; slow fade first, fast near the end"""
    return MathUtils.clamp(math.cos(MathUtils.clamp(progress) * math.pi / 2))


def layer_offset(progress: float, offset: Vec2, random_dislocation: Vec2, r: float) -> Vec2:
    """Translation of a layer: lerp(zero, offset + dislocation * (r, r), progress)"""
    target = offset + random_dislocation.scale(r, r)
    return ZERO.lerp(target, progress)


@dataclass(frozen=True)
class LayerState:
    """What the renderer needs to draw one layer at the current instant"""
    index: int
    image: np.ndarray
    encoded: Optional[bytes]
    translation: Vec2
    opacity: float
    progress: float


# =============================================================================
# Animator
# =============================================================================

class LayerAnimator:
    """
    Idle -> Running -> Completed state machine over a LayerSet.

    The animator never blocks and owns no thread: the host calls advance()
    once per frame and reads layer_states() to draw.
    """

    def __init__(
        self,
        duration_ms: float = 5000,
        offset: Vec2 = Vec2(64, -32),
        random_dislocation: Vec2 = Vec2(64, 32),
        on_complete: Optional[Callable[[], None]] = None,
        curve: Callable[[float], float] = ease_out
    ):
        self.clock = AnimationClock(duration_ms)
        self.offset = offset
        self.random_dislocation = random_dislocation
        self.on_complete = on_complete
        self.curve = curve

        self._status = AnimationStatus.IDLE
        self._layer_set: Optional[LayerSet] = None
        self._intervals: List[Tuple[float, float]] = []

    @property
    def status(self) -> AnimationStatus:
        return self._status

    @property
    def value(self) -> float:
        return self.clock.value

    @property
    def layer_set(self) -> Optional[LayerSet]:
        return self._layer_set

    @property
    def is_idle(self) -> bool:
        return self._status is AnimationStatus.IDLE

    @property
    def is_running(self) -> bool:
        return self._status is AnimationStatus.RUNNING

    @property
    def is_completed(self) -> bool:
        return self._status is AnimationStatus.COMPLETED

    def start(self, layer_set: LayerSet) -> None:
        """Begin a snap cycle. Only valid while idle."""
        if layer_set is None:
            raise ValueError("start() needs a LayerSet")
        if self._status is not AnimationStatus.IDLE:
            raise AnimationInProgressError(
                f"Cannot start while {self._status.value}; reset() first"
            )

        self._layer_set = layer_set
        count = len(layer_set)
        self._intervals = [layer_interval(i, count) for i in range(count)]
        self.clock.reset()
        self._status = AnimationStatus.RUNNING
        logger.info("Snap animation started with %d layers over %.0f ms",
                    count, self.clock.duration_ms)

    def reset(self) -> None:
        """Drop the layers and rewind to idle. Never notifies completion."""
        if self._status is AnimationStatus.IDLE:
            return
        self._layer_set = None
        self._intervals = []
        self.clock.reset()
        self._status = AnimationStatus.IDLE
        logger.debug("Snap animation reset")

    def advance(self, dt_ms: float) -> float:
        """Advance the shared clock by dt_ms; returns global progress"""
        if dt_ms < 0:
            raise ValueError(f"dt_ms must be non-negative, got {dt_ms}")
        if self._status is AnimationStatus.RUNNING:
            self.clock.advance(dt_ms)
            self._check_completed()
        return self.clock.value

    def seek(self, t: float) -> float:
        """Move the running animation forward to progress t"""
        if self._status is AnimationStatus.RUNNING:
            self.clock.seek(t)
            self._check_completed()
        return self.clock.value

    def _check_completed(self) -> None:
        if self.clock.is_finished:
            self._status = AnimationStatus.COMPLETED
            logger.info("Snap animation completed")
            if self.on_complete is not None:
                self.on_complete()

    def interval(self, index: int) -> Tuple[float, float]:
        return self._intervals[index]

    def layer_state(self, index: int) -> LayerState:
        """Current (image, translation, opacity) of one layer"""
        if self._layer_set is None:
            raise IndexError("No layers while idle")
        layer = self._layer_set[index]
        start, end = self._intervals[index]
        progress = layer_progress(self.clock.value, start, end, self.curve)
        return LayerState(
            index=index,
            image=layer.pixels,
            encoded=layer.encoded,
            translation=layer_offset(progress, self.offset, self.random_dislocation, layer.dislocation),
            opacity=layer_opacity(progress),
            progress=progress
        )

    def layer_states(self) -> List[LayerState]:
        """Render states of every layer (empty while idle)"""
        if self._layer_set is None:
            return []
        return [self.layer_state(i) for i in range(len(self._layer_set))]
