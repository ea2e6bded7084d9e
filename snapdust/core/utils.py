"""
Utility types and math helpers shared by the snap pipeline
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Vec2:
    """Immutable 2D vector used for layer offsets and dislocation ranges"""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: 'Vec2') -> 'Vec2':
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vec2') -> 'Vec2':
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> 'Vec2':
        return Vec2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> 'Vec2':
        return self.__mul__(scalar)

    def __neg__(self) -> 'Vec2':
        return Vec2(-self.x, -self.y)

    def scale(self, sx: float, sy: float) -> 'Vec2':
        """Component-wise scale (x by sx, y by sy)"""
        return Vec2(self.x * sx, self.y * sy)

    def lerp(self, other: 'Vec2', t: float) -> 'Vec2':
        return Vec2(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t
        )

    def to_int_tuple(self) -> Tuple[int, int]:
        return (int(round(self.x)), int(round(self.y)))

    @staticmethod
    def parse(text: str) -> 'Vec2':
        """Parse 'X,Y' (as typed on the command line) into a vector"""
        parts = [p.strip() for p in text.split(',')]
        if len(parts) != 2:
            raise ValueError(f"Expected 'X,Y', got '{text}'")
        return Vec2(float(parts[0]), float(parts[1]))


ZERO = Vec2(0.0, 0.0)


class MathUtils:
    """Scalar helpers for animation calculations"""

    @staticmethod
    def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
        """Clamp value into [low, high]"""
        return max(low, min(high, value))

    @staticmethod
    def round_half_up(value: float) -> int:
        """Round x.5 away from zero (numpy/python round to even)"""
        if value >= 0:
            return int(np.floor(value + 0.5))
        return -int(np.floor(-value + 0.5))
