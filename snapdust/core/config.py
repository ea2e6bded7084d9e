"""
Snap Configuration - Immutable per-effect settings
"""

from dataclasses import dataclass, replace
from typing import Callable, Optional

from .decompose import validate_bucket_count
from .easing import EASING_FUNCTIONS, get_easing
from .errors import SnapConfigError
from .utils import Vec2


@dataclass(frozen=True)
class SnapConfig:
    """
    Settings of one snappable subject, fixed at construction.

    Attributes:
        on_snapped: Called once when the snap animation ends
        offset: Direction and range of the snap (where and how far the dust goes)
        duration_ms: Duration of the whole snap animation
        random_dislocation: How much each layer can be randomized; with offset
            (100, 100) and dislocation (10, 10) a layer ends between 90 and 110
        bucket_count: Number of layers; more looks better but costs more CPU
        snap_on_tap: tap() snaps (or resets once gone) when True
        grace_ms: Delay between layers being ready and the drift starting
        easing: Name of the curve shaping each layer's fade and drift
        seed: Seed of the effect's random source (None = fresh entropy)
    """
    on_snapped: Callable[[], None]
    offset: Vec2 = Vec2(64, -32)
    duration_ms: float = 5000
    random_dislocation: Vec2 = Vec2(64, 32)
    bucket_count: int = 16
    snap_on_tap: bool = False
    grace_ms: float = 100
    easing: str = 'ease_out'
    seed: Optional[int] = None

    def __post_init__(self):
        if not callable(self.on_snapped):
            raise SnapConfigError("on_snapped must be a callable")
        validate_bucket_count(self.bucket_count)
        if self.duration_ms <= 0:
            raise SnapConfigError(f"duration_ms must be positive, got {self.duration_ms}")
        if self.grace_ms < 0:
            raise SnapConfigError(f"grace_ms must not be negative, got {self.grace_ms}")
        if not isinstance(self.offset, Vec2) or not isinstance(self.random_dislocation, Vec2):
            raise SnapConfigError("offset and random_dislocation must be Vec2")
        if self.easing not in EASING_FUNCTIONS:
            raise SnapConfigError(
                f"Unknown easing '{self.easing}' (choose from {', '.join(sorted(EASING_FUNCTIONS))})"
            )

    def replace(self, **changes) -> 'SnapConfig':
        """Copy with some fields changed (validated again)"""
        return replace(self, **changes)

    @property
    def curve(self) -> Callable[[float], float]:
        return get_easing(self.easing)

    @property
    def max_reach(self) -> Vec2:
        """Largest |translation| a layer can reach on each axis"""
        return Vec2(
            abs(self.offset.x) + abs(self.random_dislocation.x),
            abs(self.offset.y) + abs(self.random_dislocation.y)
        )
