"""
Easing Curves

Progress-shaping functions used by the layer animator.

Each layer of the snap reads one eased progress value for both its fade and
its drift. The default is the classic ease-out cubic bezier (0, 0, 0.58, 1):
it moves quickly at first and slows down as it approaches the end.
"""

from typing import Callable
from dataclasses import dataclass, field


def linear(t: float) -> float:
    return t


# =============================================================================
# Cubic Bezier Curves
# =============================================================================

@dataclass(frozen=True)
class BezierCurve:
    """
    CSS-style cubic-bezier timing curve through (0,0), (x1,y1), (x2,y2), (1,1).

    Endpoints come back exactly, so a finished layer is fully faded.
    """
    x1: float
    y1: float
    x2: float
    y2: float
    _cx: tuple = field(init=False, repr=False, compare=False)
    _cy: tuple = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Polynomial coefficients (a, b, c) of a*s^3 + b*s^2 + c*s per axis
        object.__setattr__(self, '_cx', self._coefficients(self.x1, self.x2))
        object.__setattr__(self, '_cy', self._coefficients(self.y1, self.y2))

    @staticmethod
    def _coefficients(p1: float, p2: float) -> tuple:
        c = 3.0 * p1
        b = 3.0 * (p2 - p1) - c
        a = 1.0 - c - b
        return a, b, c

    @staticmethod
    def _sample(coeffs: tuple, s: float) -> float:
        a, b, c = coeffs
        return ((a * s + b) * s + c) * s

    def _slope_x(self, s: float) -> float:
        a, b, c = self._cx
        return (3.0 * a * s + 2.0 * b) * s + c

    def _solve_x(self, x: float, epsilon: float = 1e-7) -> float:
        """Curve parameter s whose x equals the given time"""
        s = x
        for _ in range(8):
            error = self._sample(self._cx, s) - x
            if abs(error) < epsilon:
                return s
            slope = self._slope_x(s)
            if abs(slope) < 1e-6:
                break
            s -= error / slope

        # Newton stalled: bisect, x(s) is monotonic on [0, 1]
        low, high = 0.0, 1.0
        s = x
        while high - low > epsilon:
            if self._sample(self._cx, s) < x:
                low = s
            else:
                high = s
            s = (low + high) / 2
        return s

    def __call__(self, t: float) -> float:
        if t <= 0.0:
            return 0.0
        if t >= 1.0:
            return 1.0
        return self._sample(self._cy, self._solve_x(t))


EASE = BezierCurve(0.25, 0.1, 0.25, 1.0)
EASE_IN = BezierCurve(0.42, 0.0, 1.0, 1.0)
EASE_OUT = BezierCurve(0.0, 0.0, 0.58, 1.0)
EASE_IN_OUT = BezierCurve(0.42, 0.0, 0.58, 1.0)
DECELERATE = BezierCurve(0.0, 0.0, 0.2, 1.0)


def ease_out(t: float) -> float:
    """Default snap curve - fast start, slow finish"""
    return EASE_OUT(t)


EASING_FUNCTIONS = {
    'linear': linear,
    'ease': EASE,
    'ease_in': EASE_IN,
    'ease_out': EASE_OUT,
    'ease_in_out': EASE_IN_OUT,
    'decelerate': DECELERATE,
}


def get_easing(name: str) -> Callable[[float], float]:
    """
    Look up a named curve.

    Raises:
        ValueError: the name is not registered
    """
    try:
        return EASING_FUNCTIONS[name]
    except KeyError:
        raise ValueError(
            f"Unknown easing '{name}' (choose from {', '.join(sorted(EASING_FUNCTIONS))})"
        ) from None

